"""核心数据模型定义"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

Point = Tuple[float, ...]


class Emotion(str, Enum):
    """嘴型情绪标签"""
    NEUTRAL = "Neutral"
    HAPPY = "Happy"
    SAD = "Sad"


EYES_OPEN = "Eyes: Open"
EYES_CLOSED = "Eyes: Closed"


@dataclass
class FaceLandmarks:
    """单帧单张人脸的关键点，按 FaceMesh 索引排列"""
    points: Sequence[Point]


@dataclass
class FrameSignal:
    """单帧几何信号"""
    left_ear: float
    right_ear: float
    ear: float
    mouth_offset: float


@dataclass(frozen=True)
class Open:
    """睁眼状态"""


@dataclass(frozen=True)
class ClosedSince:
    """闭眼状态，记录闭眼开始时间（毫秒）"""
    since: float


EyeState = Union[Open, ClosedSince]


@dataclass
class EyeResult:
    """眼睛状态机输出"""
    ear: float
    is_closed: bool
    is_drowsy: bool
    closed_for_ms: float


@dataclass
class BlinkResult:
    """眨眼频率统计结果"""
    blink_detected: bool
    blinks_per_minute: int
    is_excessive: bool


@dataclass
class MouthResult:
    """嘴型分析结果"""
    mouth_offset: float
    smooth_offset: float
    emotion: Emotion


@dataclass
class AlertStatus:
    """综合困倦状态"""
    is_drowsy: bool
    reasons: List[str]


@dataclass
class MonitorConfig:
    """可调参数"""
    ear_threshold: float = 0.25
    drowsy_time_ms: float = 500.0
    blink_time_ms: float = 300.0
    max_blinks_per_min: int = 35
    blink_window_ms: float = 60000.0
    smoothing_window: int = 5
    happy_threshold: float = 0.015
    sad_threshold: float = -0.015
    reset_drowsy_on_face_loss: bool = True
    reset_smoother_on_face_loss: bool = False


@dataclass
class FrameOutput:
    """每帧提供给渲染和报警的输出"""
    ear: float = 0.0
    eye_status: str = EYES_OPEN
    emotion: Emotion = Emotion.NEUTRAL
    blinks_per_minute: int = 0
    drowsy_warning: bool = False
    reasons: List[str] = field(default_factory=list)
    face_detected: bool = False
    frame_skipped: bool = False
    mouth_offset: float = 0.0
    smooth_offset: float = 0.0
    eye_points: List[Point] = field(default_factory=list)
    mouth_points: List[Point] = field(default_factory=list)
    timestamp: Optional[float] = None
