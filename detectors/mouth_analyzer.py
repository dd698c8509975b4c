"""嘴型分析模块：嘴角偏移平滑和情绪分类"""

from collections import deque

from models.data_models import Emotion, MouthResult


class OffsetSmoother:
    """维护最近 N 帧嘴角偏移的滑动窗口，输出均值"""

    def __init__(self, window_size: int = 5):
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        self.window_size = window_size
        self._window = deque(maxlen=window_size)

    def push(self, value: float) -> float:
        """追加一个偏移值（超出窗口时丢弃最旧值），返回当前窗口均值"""
        self._window.append(value)
        return sum(self._window) / len(self._window)

    def __len__(self):
        return len(self._window)

    @property
    def values(self):
        return list(self._window)

    def reset(self):
        """清空窗口"""
        self._window.clear()


class EmotionClassifier:
    """按固定阈值把平滑后的偏移量映射为情绪标签，无迟滞"""

    def __init__(self, happy_threshold: float = 0.015, sad_threshold: float = -0.015):
        self.happy_threshold = happy_threshold
        self.sad_threshold = sad_threshold

    def classify(self, smooth_offset: float) -> Emotion:
        if smooth_offset > self.happy_threshold:
            return Emotion.HAPPY
        if smooth_offset < self.sad_threshold:
            return Emotion.SAD
        return Emotion.NEUTRAL


class MouthAnalyzer:
    """平滑嘴角偏移并输出情绪"""

    def __init__(
        self,
        window_size: int = 5,
        happy_threshold: float = 0.015,
        sad_threshold: float = -0.015,
    ):
        self.smoother = OffsetSmoother(window_size)
        self.classifier = EmotionClassifier(happy_threshold, sad_threshold)

    def analyze(self, mouth_offset: float) -> MouthResult:
        """
        分析单帧嘴角偏移。

        Args:
            mouth_offset: 本帧原始偏移量

        Returns:
            MouthResult(mouth_offset, smooth_offset, emotion)
        """
        smooth = self.smoother.push(mouth_offset)
        return MouthResult(
            mouth_offset=mouth_offset,
            smooth_offset=smooth,
            emotion=self.classifier.classify(smooth),
        )

    def reset(self):
        self.smoother.reset()
