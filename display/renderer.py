"""界面渲染模块 - 在视频帧上绘制关键点、数值、状态信息和困倦警告。"""

import cv2
import numpy as np

from models.data_models import FrameOutput

# BGR 颜色
_RED = (0, 0, 255)
_GREEN = (0, 128, 0)
_BLUE = (255, 0, 0)
_BLACK = (0, 0, 0)
_GRAY = (128, 128, 128)
_WHITE = (255, 255, 255)
_BANNER = (38, 38, 220)

_FONT = cv2.FONT_HERSHEY_SIMPLEX


def format_value(v: float) -> str:
    """格式化浮点数为两位小数字符串。"""
    return f"{v:.2f}"


def to_pixel(point, w: int, h: int) -> tuple:
    """归一化坐标转像素坐标。"""
    return int(point[0] * w), int(point[1] * h)


class DisplayRenderer:
    """在视频帧上绘制检测结果、状态信息和困倦警告。"""

    WARNING_TEXT = "DROWSINESS DETECTED!"
    NO_FACE_TEXT = "No face detected"

    def __init__(self, mirror: bool = True, banner_alpha: float = 0.8):
        self.mirror = mirror
        self.banner_alpha = banner_alpha

    def render(self, frame: np.ndarray, output: FrameOutput) -> np.ndarray:
        """渲染检测结果到视频帧，返回渲染后的帧图像。"""
        canvas = frame.copy()

        if output.face_detected:
            self._draw_points(canvas, output)

        # 镜像显示，文字在镜像之后绘制
        if self.mirror:
            canvas = cv2.flip(canvas, 1)

        if output.face_detected:
            self._draw_info(canvas, output)
            if output.drowsy_warning:
                self._draw_warning(canvas)
        else:
            cv2.putText(canvas, self.NO_FACE_TEXT, (20, 30), _FONT, 0.7, _GRAY, 2)

        return canvas

    @staticmethod
    def _draw_points(frame: np.ndarray, output: FrameOutput) -> None:
        """眼部轮廓点红色，嘴部点蓝色。"""
        h, w = frame.shape[:2]
        for p in output.eye_points:
            cv2.circle(frame, to_pixel(p, w, h), 3, _RED, -1)
        for p in output.mouth_points:
            cv2.circle(frame, to_pixel(p, w, h), 4, _BLUE, -1)

    @staticmethod
    def _draw_info(frame: np.ndarray, output: FrameOutput) -> None:
        """左上角绘制 EAR、眨眼频率、眼睛状态和情绪。"""
        color = _RED if output.drowsy_warning else _GREEN
        lines = [
            f"EAR: {format_value(output.ear)}",
            f"Blinks/min: {output.blinks_per_minute}",
            output.eye_status,
        ]
        y = 30
        for text in lines:
            cv2.putText(frame, text, (20, y), _FONT, 0.7, color, 2)
            y += 30

        cv2.putText(frame, f"Emotion: {output.emotion.value}", (20, 150), _FONT, 0.7, _BLACK, 2)

    def _draw_warning(self, frame: np.ndarray) -> None:
        """底部半透明红色横幅。"""
        h, w = frame.shape[:2]
        top = max(h - 80, 0)
        bottom = min(top + 60, h)

        overlay = frame.copy()
        cv2.rectangle(overlay, (10, top), (w - 10, bottom), _BANNER, -1)
        cv2.addWeighted(overlay, self.banner_alpha, frame, 1 - self.banner_alpha, 0, dst=frame)

        cv2.putText(frame, self.WARNING_TEXT, (80, top + 40), _FONT, 1.0, _WHITE, 3)
