"""综合困倦判断模块"""

from typing import List

from models.data_models import AlertStatus, BlinkResult, EyeResult

REASON_EYE_CLOSURE = "eye_closure"
REASON_BLINK_RATE = "blink_rate"


class AlertnessEvaluator:
    """汇总持续闭眼和眨眼频率两路信号，任一触发即为困倦。"""

    def evaluate(self, eye_result: EyeResult, blink_result: BlinkResult) -> AlertStatus:
        """
        综合判断困倦状态。

        Args:
            eye_result: 眼睛状态机结果
            blink_result: 眨眼频率统计结果

        Returns:
            AlertStatus 包含是否困倦和触发原因列表
        """
        reasons: List[str] = []
        if eye_result.is_drowsy:
            reasons.append(REASON_EYE_CLOSURE)
        if blink_result.is_excessive:
            reasons.append(REASON_BLINK_RATE)
        return AlertStatus(is_drowsy=len(reasons) > 0, reasons=reasons)
