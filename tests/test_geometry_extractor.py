"""几何特征提取单元测试"""

import math

import pytest

from detectors.geometry_extractor import (
    EYE_CONTOUR_INDICES,
    DegenerateGeometry,
    LandmarkError,
    MalformedLandmarkSet,
    extract_signal,
    eye_aspect_ratio,
    mouth_offset,
    overlay_points,
)
from models.data_models import FaceLandmarks


class TestEyeAspectRatio:
    def test_basic_ratio(self):
        ear = eye_aspect_ratio((0.5, 0.4), (0.5, 0.43), (0.4, 0.42), (0.5, 0.42))
        assert ear == pytest.approx(0.3)

    def test_closed_eye(self):
        assert eye_aspect_ratio((1, 1), (1, 1), (0, 1), (2, 1)) == 0.0

    def test_zero_horizontal_raises(self):
        with pytest.raises(DegenerateGeometry):
            eye_aspect_ratio((0, 0), (0, 1), (3, 3), (3, 3))

    def test_nan_coordinates_raise(self):
        with pytest.raises(DegenerateGeometry):
            eye_aspect_ratio((0, float("nan")), (0, 1), (0, 0), (1, 0))

    def test_pixel_units_give_same_ratio(self):
        """单位一致时比值与坐标尺度无关"""
        norm = eye_aspect_ratio((0.5, 0.4), (0.5, 0.43), (0.4, 0.42), (0.5, 0.42))
        px = eye_aspect_ratio((320, 256), (320, 275.2), (256, 268.8), (320, 268.8))
        assert px == pytest.approx(norm)


class TestMouthOffset:
    def test_corners_raised_is_positive(self):
        # 图像 Y 向下，嘴角 y 小于唇中心 -> 正
        assert mouth_offset((0.4, 0.68), (0.6, 0.68), (0.5, 0.70), (0.5, 0.72)) == pytest.approx(0.03)

    def test_corners_dropped_is_negative(self):
        assert mouth_offset((0.4, 0.74), (0.6, 0.74), (0.5, 0.70), (0.5, 0.72)) == pytest.approx(-0.03)

    def test_asymmetric_corners_averaged(self):
        assert mouth_offset((0.4, 0.70), (0.6, 0.72), (0.5, 0.70), (0.5, 0.72)) == pytest.approx(0.0)


class TestExtractSignal:
    def test_values(self, landmarks_factory):
        signal = extract_signal(landmarks_factory(ear=0.3, offset=0.02))
        assert signal.left_ear == pytest.approx(0.3)
        assert signal.right_ear == pytest.approx(0.3)
        assert signal.ear == pytest.approx(0.3)
        assert signal.mouth_offset == pytest.approx(0.02)

    def test_ear_is_mean_of_both_eyes(self, landmarks_factory):
        lm = landmarks_factory(ear=0.3)
        points = list(lm.points)
        # 右眼闭合
        points[386] = (0.65, 0.40)
        points[374] = (0.65, 0.40)
        signal = extract_signal(FaceLandmarks(points=points))
        assert signal.right_ear == 0.0
        assert signal.ear == pytest.approx(0.15)

    def test_accepts_3d_points(self, landmarks_factory):
        lm = landmarks_factory(ear=0.2)
        points = [(x, y, 0.01) for x, y in lm.points]
        assert extract_signal(FaceLandmarks(points=points)).ear == pytest.approx(0.2)

    def test_too_few_points_raises(self):
        with pytest.raises(MalformedLandmarkSet):
            extract_signal(FaceLandmarks(points=[(0.5, 0.5)] * 100))

    def test_empty_points_raises(self):
        with pytest.raises(MalformedLandmarkSet):
            extract_signal(FaceLandmarks(points=[]))

    def test_bad_point_raises(self, landmarks_factory):
        points = list(landmarks_factory().points)
        points[33] = None
        with pytest.raises(MalformedLandmarkSet):
            extract_signal(FaceLandmarks(points=points))

    def test_one_dimensional_point_raises(self, landmarks_factory):
        points = list(landmarks_factory().points)
        points[13] = (0.5,)
        with pytest.raises(MalformedLandmarkSet):
            extract_signal(FaceLandmarks(points=points))

    def test_degenerate_eye_raises(self, landmarks_factory):
        points = list(landmarks_factory().points)
        points[133] = points[33]
        with pytest.raises(DegenerateGeometry):
            extract_signal(FaceLandmarks(points=points))

    def test_errors_share_base_class(self):
        assert issubclass(MalformedLandmarkSet, LandmarkError)
        assert issubclass(DegenerateGeometry, LandmarkError)

    def test_result_is_finite(self, landmarks_factory):
        signal = extract_signal(landmarks_factory(ear=0.27, offset=-0.01))
        assert math.isfinite(signal.ear)
        assert math.isfinite(signal.mouth_offset)


class TestOverlayPoints:
    def test_pass_through(self, landmarks_factory):
        lm = landmarks_factory(ear=0.3, offset=0.02)
        eye, mouth = overlay_points(lm)
        assert len(eye) == len(EYE_CONTOUR_INDICES) == 26
        assert eye[0] == lm.points[33]
        assert mouth == [lm.points[61], lm.points[291], lm.points[13], lm.points[14]]
