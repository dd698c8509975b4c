"""逐帧状态归约器，串联几何提取、平滑、眼睛状态机、眨眼统计和情绪分类"""

import dataclasses
import logging
from typing import Optional

from detectors.blink_counter import BlinkRateAccumulator
from detectors.eye_state_tracker import EyeStateTracker
from detectors.geometry_extractor import LandmarkError, extract_signal, overlay_points
from detectors.mouth_analyzer import MouthAnalyzer
from evaluators.alertness_evaluator import REASON_EYE_CLOSURE, AlertnessEvaluator
from models.data_models import (
    EYES_CLOSED,
    EYES_OPEN,
    Emotion,
    FaceLandmarks,
    FrameOutput,
    MonitorConfig,
)

logger = logging.getLogger(__name__)


class AlertnessMonitor:
    """
    驾驶员警觉状态监测核心。

    每帧调用一次 step(landmarks, now)，所有跨帧状态保存在实例内，
    不读取系统时钟，相同输入序列产生相同输出序列。
    """

    def __init__(self, config: Optional[MonitorConfig] = None):
        self.config = config or MonitorConfig()
        self._build()

    def _build(self):
        cfg = self.config
        self.eye_tracker = EyeStateTracker(
            ear_threshold=cfg.ear_threshold,
            drowsy_time_ms=cfg.drowsy_time_ms,
        )
        self.blink_counter = BlinkRateAccumulator(
            blink_time_ms=cfg.blink_time_ms,
            max_blinks_per_min=cfg.max_blinks_per_min,
            window_ms=cfg.blink_window_ms,
        )
        self.mouth_analyzer = MouthAnalyzer(
            window_size=cfg.smoothing_window,
            happy_threshold=cfg.happy_threshold,
            sad_threshold=cfg.sad_threshold,
        )
        self.evaluator = AlertnessEvaluator()
        self._last_now = None
        self._last_output = FrameOutput()

    def step(self, landmarks: Optional[FaceLandmarks], now: float) -> FrameOutput:
        """
        处理一帧。

        Args:
            landmarks: 第一张人脸的关键点；未检测到人脸时为 None
            now: 单调时钟时间戳（毫秒），不得小于上一帧

        Returns:
            FrameOutput
        """
        if self._last_now is not None and now < self._last_now:
            raise ValueError(f"timestamp went backwards: {now} < {self._last_now}")
        self._last_now = now

        if landmarks is None:
            return self._no_face(now)

        try:
            signal = extract_signal(landmarks)
        except LandmarkError as e:
            # 本帧跳过，保持上一帧状态
            logger.debug("跳过无效帧 t=%.1f: %s", now, e)
            return dataclasses.replace(self._last_output, frame_skipped=True, timestamp=now)

        mouth_result = self.mouth_analyzer.analyze(signal.mouth_offset)
        eye_result = self.eye_tracker.update(signal.ear, now)
        blink_result = self.blink_counter.update(eye_result.is_closed, now)
        status = self.evaluator.evaluate(eye_result, blink_result)

        eye_points, mouth_points = overlay_points(landmarks)

        output = FrameOutput(
            ear=signal.ear,
            eye_status=EYES_CLOSED if eye_result.is_closed else EYES_OPEN,
            emotion=mouth_result.emotion,
            blinks_per_minute=blink_result.blinks_per_minute,
            drowsy_warning=status.is_drowsy,
            reasons=status.reasons,
            face_detected=True,
            mouth_offset=mouth_result.mouth_offset,
            smooth_offset=mouth_result.smooth_offset,
            eye_points=eye_points,
            mouth_points=mouth_points,
            timestamp=now,
        )
        self._last_output = output
        return output

    def _no_face(self, now: float) -> FrameOutput:
        """未检测到人脸：不做眼睛和情绪计算，按配置处理困倦状态"""
        if self.config.reset_drowsy_on_face_loss:
            self.eye_tracker.reset()
        if self.config.reset_smoother_on_face_loss:
            self.mouth_analyzer.reset()

        drowsy = self.eye_tracker.is_drowsy
        output = FrameOutput(
            ear=0.0,
            eye_status=EYES_OPEN,
            emotion=Emotion.NEUTRAL,
            blinks_per_minute=self.blink_counter.roll(now),
            drowsy_warning=drowsy,
            reasons=[REASON_EYE_CLOSURE] if drowsy else [],
            face_detected=False,
            timestamp=now,
        )
        self._last_output = output
        return output

    def reset(self):
        """清空全部跨帧状态"""
        self._build()
