"""人脸关键点检测模块，基于 MediaPipe Tasks FaceLandmarker"""

import logging
import os
from typing import Optional

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from models.data_models import FaceLandmarks

logger = logging.getLogger(__name__)

DEFAULT_MODEL_PATH = "assets/face_landmarker.task"


class FaceDetector:
    """使用 MediaPipe FaceLandmarker（VIDEO 模式）检测单张人脸关键点"""

    def __init__(
        self,
        model_path: str = DEFAULT_MODEL_PATH,
        min_detection_confidence: float = 0.5,
    ):
        """加载 FaceLandmarker 模型"""
        if not os.path.exists(model_path):
            raise FileNotFoundError(f"FaceLandmarker 模型不存在: {model_path}")

        options = vision.FaceLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=model_path),
            running_mode=vision.RunningMode.VIDEO,
            num_faces=1,
            min_face_detection_confidence=min_detection_confidence,
            min_tracking_confidence=0.5,
        )
        self._landmarker = vision.FaceLandmarker.create_from_options(options)
        self._last_timestamp = -1
        logger.info("FaceLandmarker 已加载: %s", model_path)

    def detect(self, frame: np.ndarray, timestamp_ms: float) -> Optional[FaceLandmarks]:
        """
        检测单帧图像中的人脸关键点。

        Args:
            frame: BGR 格式的 OpenCV 图像帧
            timestamp_ms: 帧时间戳（毫秒），VIDEO 模式要求严格递增

        Returns:
            第一张人脸的归一化关键点；未检测到人脸时返回 None
        """
        # BGR -> RGB
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)

        ts = max(int(timestamp_ms), self._last_timestamp + 1)
        self._last_timestamp = ts
        results = self._landmarker.detect_for_video(image, ts)

        if not results.face_landmarks:
            return None

        # 只取第一张人脸
        face = results.face_landmarks[0]
        return FaceLandmarks(points=[(lm.x, lm.y) for lm in face])

    def close(self):
        """释放 MediaPipe 资源"""
        self._landmarker.close()
