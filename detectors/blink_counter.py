"""眨眼频率统计模块，统计 60 秒滚动窗口内的眨眼次数"""

import logging
from typing import Optional

from models.data_models import BlinkResult, ClosedSince, EyeState, Open

logger = logging.getLogger(__name__)


class BlinkRateAccumulator:
    """识别短时闭眼（眨眼），按固定窗口计数，超过上限时输出过频信号"""

    def __init__(
        self,
        blink_time_ms: float = 300.0,
        max_blinks_per_min: int = 35,
        window_ms: float = 60000.0,
        window_start: Optional[float] = None,
    ):
        self.blink_time_ms = blink_time_ms
        self.max_blinks_per_min = max_blinks_per_min
        self.window_ms = window_ms
        self.window_start = window_start
        self.closure: EyeState = Open()
        self.count_in_window = 0

    def update(self, is_closed: bool, now: float) -> BlinkResult:
        """
        以当前帧的睁闭眼状态更新眨眼计数。

        Args:
            is_closed: 本帧是否闭眼（EAR 低于阈值）
            now: 单调时钟时间戳（毫秒）

        Returns:
            BlinkResult(blink_detected, blinks_per_minute, is_excessive)
        """
        if self.window_start is None:
            self.window_start = now

        blink_detected = False
        if is_closed:
            if isinstance(self.closure, Open):
                self.closure = ClosedSince(now)
        else:
            if isinstance(self.closure, ClosedSince) and now - self.closure.since < self.blink_time_ms:
                self.count_in_window += 1
                blink_detected = True
            self.closure = Open()

        self.roll(now)

        return BlinkResult(
            blink_detected=blink_detected,
            blinks_per_minute=self.count_in_window,
            is_excessive=self.count_in_window > self.max_blinks_per_min,
        )

    def roll(self, now: float) -> int:
        """窗口超时则清零计数并把窗口起点移到 now，返回当前计数；不改变闭眼记录"""
        if self.window_start is None:
            self.window_start = now
        elif now - self.window_start > self.window_ms:
            logger.debug("眨眼窗口重置，上一窗口计数 %d", self.count_in_window)
            self.count_in_window = 0
            self.window_start = now
        return self.count_in_window

    def reset(self):
        """清空计数和闭眼记录，下一帧重新开始窗口"""
        self.closure = Open()
        self.count_in_window = 0
        self.window_start = None
