import sys
import os

# Add project root to sys.path so tests can import from all modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from hypothesis import settings

from models.data_models import FaceLandmarks

# CI profile: more examples for thorough testing
settings.register_profile("ci", max_examples=200)
# Dev profile: fewer examples for faster iteration
settings.register_profile("dev", max_examples=100)
# Default to dev profile
settings.load_profile("dev")

NUM_LANDMARKS = 478


def make_landmarks(ear=0.3, offset=0.0, num_points=NUM_LANDMARKS):
    """构造一组关键点，使双眼 EAR 和嘴角偏移等于给定值（归一化坐标）。"""
    points = [(0.5, 0.5)] * num_points

    def put(index, point):
        if index < num_points:
            points[index] = point

    half = ear * 0.1 / 2.0
    # 左眼：水平距离 0.1
    put(33, (0.30, 0.40))
    put(133, (0.40, 0.40))
    put(159, (0.35, 0.40 - half))
    put(145, (0.35, 0.40 + half))
    # 右眼
    put(362, (0.60, 0.40))
    put(263, (0.70, 0.40))
    put(386, (0.65, 0.40 - half))
    put(374, (0.65, 0.40 + half))
    # 嘴：唇中心 y=0.71，嘴角高于中心 offset
    put(13, (0.50, 0.70))
    put(14, (0.50, 0.72))
    put(61, (0.45, 0.71 - offset))
    put(291, (0.55, 0.71 - offset))

    return FaceLandmarks(points=points)


@pytest.fixture
def landmarks_factory():
    return make_landmarks
