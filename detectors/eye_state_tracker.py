"""眼睛状态机模块，根据 EAR 时间序列判断闭眼并锁存困倦状态"""

from models.data_models import ClosedSince, EyeResult, EyeState, Open


class EyeStateTracker:
    """睁眼/闭眼两状态机，闭眼持续超过阈值后锁存困倦标志，睁眼即复位"""

    def __init__(self, ear_threshold: float = 0.25, drowsy_time_ms: float = 500.0):
        """初始化阈值和状态"""
        self.ear_threshold = ear_threshold
        self.drowsy_time_ms = drowsy_time_ms
        self.state: EyeState = Open()
        self.is_drowsy = False

    def update(self, ear: float, now: float) -> EyeResult:
        """
        以当前帧的 EAR 和时间戳推进状态机。

        Args:
            ear: 双眼平均 EAR
            now: 单调时钟时间戳（毫秒）

        Returns:
            EyeResult(ear, is_closed, is_drowsy, closed_for_ms)
        """
        is_closed = ear < self.ear_threshold

        if is_closed:
            if isinstance(self.state, Open):
                self.state = ClosedSince(now)
            elif not self.is_drowsy and now - self.state.since > self.drowsy_time_ms:
                self.is_drowsy = True
        else:
            # 睁眼立即复位
            self.state = Open()
            self.is_drowsy = False

        closed_for = now - self.state.since if isinstance(self.state, ClosedSince) else 0.0

        return EyeResult(
            ear=ear,
            is_closed=is_closed,
            is_drowsy=self.is_drowsy,
            closed_for_ms=closed_for,
        )

    def reset(self):
        """回到睁眼、非困倦状态"""
        self.state = Open()
        self.is_drowsy = False
