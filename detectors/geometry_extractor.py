"""几何特征提取模块，负责从人脸关键点计算 EAR 和嘴角偏移量"""

import math
from typing import Dict, List, Sequence, Tuple

from models.data_models import FaceLandmarks, FrameSignal, Point

# 关键点索引常量（MediaPipe FaceMesh）
LEFT_EYE_INDICES = {"top": 159, "bottom": 145, "outer": 33, "inner": 133}
RIGHT_EYE_INDICES = {"top": 386, "bottom": 374, "outer": 362, "inner": 263}

MOUTH_INDICES = {
    "left": 61,
    "right": 291,
    "top": 13,
    "bottom": 14,
}

# 叠加绘制用的眼部轮廓点
EYE_CONTOUR_INDICES = [
    33, 133, 160, 159, 158, 157, 173, 144, 145, 153, 154, 155, 246,
    362, 263, 387, 386, 385, 384, 398, 373, 374, 380, 381, 382, 466,
]


class LandmarkError(Exception):
    """关键点无法用于计算时抛出"""


class MalformedLandmarkSet(LandmarkError):
    """所需索引越界或关键点缺失"""


class DegenerateGeometry(LandmarkError):
    """参考距离为零或出现非有限值"""


def _point(points: Sequence[Point], index: int) -> Tuple[float, float]:
    """取出索引处的 (x, y)，越界或格式错误时抛出 MalformedLandmarkSet"""
    if index < 0 or index >= len(points):
        raise MalformedLandmarkSet(
            f"landmark index {index} out of range for {len(points)} points"
        )
    p = points[index]
    try:
        return float(p[0]), float(p[1])
    except (TypeError, IndexError, ValueError) as e:
        raise MalformedLandmarkSet(f"landmark {index} is not a 2D point: {p!r}") from e


def eye_aspect_ratio(
    top: Tuple[float, float],
    bottom: Tuple[float, float],
    outer: Tuple[float, float],
    inner: Tuple[float, float],
) -> float:
    """
    计算单只眼睛的 EAR 值。

    公式: EAR = |top-bottom| / |outer-inner|

    Raises:
        DegenerateGeometry: 水平距离为零或结果非有限
    """
    horizontal = math.dist(outer, inner)
    if horizontal == 0.0 or not math.isfinite(horizontal):
        raise DegenerateGeometry("eye corner distance is zero")

    ear = math.dist(top, bottom) / horizontal
    if not math.isfinite(ear):
        raise DegenerateGeometry(f"non-finite EAR: {ear}")
    return ear


def mouth_offset(
    left: Tuple[float, float],
    right: Tuple[float, float],
    top: Tuple[float, float],
    bottom: Tuple[float, float],
) -> float:
    """
    计算嘴角相对唇中心的纵向偏移。

    图像 Y 轴向下，嘴角高于唇中心时偏移为正（笑），低于时为负。
    """
    center_y = (top[1] + bottom[1]) / 2.0
    left_offset = center_y - left[1]
    right_offset = center_y - right[1]
    offset = (left_offset + right_offset) / 2.0
    if not math.isfinite(offset):
        raise DegenerateGeometry(f"non-finite mouth offset: {offset}")
    return offset


def _eye_points(points: Sequence[Point], indices: Dict[str, int]) -> Dict[str, Tuple[float, float]]:
    return {key: _point(points, idx) for key, idx in indices.items()}


def extract_signal(landmarks: FaceLandmarks) -> FrameSignal:
    """
    从单帧关键点计算 FrameSignal。

    Args:
        landmarks: 单张人脸的全部关键点

    Returns:
        FrameSignal(left_ear, right_ear, ear, mouth_offset)

    Raises:
        MalformedLandmarkSet: 关键点不完整
        DegenerateGeometry: 几何退化，无法计算
    """
    points = landmarks.points
    left = _eye_points(points, LEFT_EYE_INDICES)
    right = _eye_points(points, RIGHT_EYE_INDICES)
    mouth = {key: _point(points, idx) for key, idx in MOUTH_INDICES.items()}

    left_ear = eye_aspect_ratio(left["top"], left["bottom"], left["outer"], left["inner"])
    right_ear = eye_aspect_ratio(right["top"], right["bottom"], right["outer"], right["inner"])

    return FrameSignal(
        left_ear=left_ear,
        right_ear=right_ear,
        ear=(left_ear + right_ear) / 2.0,
        mouth_offset=mouth_offset(mouth["left"], mouth["right"], mouth["top"], mouth["bottom"]),
    )


def overlay_points(landmarks: FaceLandmarks) -> Tuple[List[Point], List[Point]]:
    """返回用于叠加绘制的眼部轮廓点和嘴部四点（原样透传）"""
    points = landmarks.points
    eye = [points[i] for i in EYE_CONTOUR_INDICES if i < len(points)]
    mouth = [
        points[MOUTH_INDICES[key]]
        for key in ("left", "right", "top", "bottom")
        if MOUTH_INDICES[key] < len(points)
    ]
    return eye, mouth
