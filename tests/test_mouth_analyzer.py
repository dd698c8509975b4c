"""嘴角偏移平滑与情绪分类测试"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from detectors.mouth_analyzer import EmotionClassifier, MouthAnalyzer, OffsetSmoother
from models.data_models import Emotion

offsets = st.floats(min_value=-0.1, max_value=0.1, allow_nan=False, allow_infinity=False)


class TestOffsetSmoother:
    def test_single_value(self):
        assert OffsetSmoother().push(0.02) == pytest.approx(0.02)

    def test_partial_window_mean(self):
        s = OffsetSmoother(5)
        s.push(0.01)
        assert s.push(0.03) == pytest.approx(0.02)
        assert len(s) == 2

    def test_evicts_oldest(self):
        s = OffsetSmoother(5)
        for _ in range(5):
            s.push(0.02)
        mean = s.push(-0.02)
        assert mean == pytest.approx(0.012)
        assert s.values == pytest.approx([0.02, 0.02, 0.02, 0.02, -0.02])

    def test_invalid_window_size(self):
        with pytest.raises(ValueError):
            OffsetSmoother(0)

    def test_reset(self):
        s = OffsetSmoother(3)
        s.push(1.0)
        s.reset()
        assert len(s) == 0
        assert s.push(0.5) == pytest.approx(0.5)

    @given(values=st.lists(offsets, min_size=1, max_size=50), size=st.integers(min_value=1, max_value=10))
    def test_window_bounded_and_mean_of_tail(self, values, size):
        s = OffsetSmoother(size)
        for v in values:
            mean = s.push(v)
            assert 1 <= len(s) <= size
        tail = values[-size:]
        assert mean == pytest.approx(sum(tail) / len(tail))

    @given(values=st.lists(offsets, min_size=1, max_size=30))
    def test_deterministic(self, values):
        a, b = OffsetSmoother(), OffsetSmoother()
        assert [a.push(v) for v in values] == [b.push(v) for v in values]


class TestEmotionClassifier:
    @pytest.fixture
    def classifier(self):
        return EmotionClassifier()

    def test_happy(self, classifier):
        assert classifier.classify(0.02) is Emotion.HAPPY

    def test_sad(self, classifier):
        assert classifier.classify(-0.02) is Emotion.SAD

    def test_neutral(self, classifier):
        assert classifier.classify(0.0) is Emotion.NEUTRAL
        assert classifier.classify(0.012) is Emotion.NEUTRAL

    def test_boundaries_are_neutral(self, classifier):
        assert classifier.classify(0.015) is Emotion.NEUTRAL
        assert classifier.classify(-0.015) is Emotion.NEUTRAL

    def test_custom_thresholds(self):
        c = EmotionClassifier(happy_threshold=0.05, sad_threshold=-0.01)
        assert c.classify(0.04) is Emotion.NEUTRAL
        assert c.classify(-0.02) is Emotion.SAD

    def test_label_values(self):
        assert [e.value for e in Emotion] == ["Neutral", "Happy", "Sad"]


class TestMouthAnalyzer:
    def test_smoothing_then_classify(self):
        analyzer = MouthAnalyzer()
        for _ in range(5):
            result = analyzer.analyze(0.02)
        assert result.smooth_offset == pytest.approx(0.02)
        assert result.emotion is Emotion.HAPPY

        result = analyzer.analyze(-0.02)
        assert result.mouth_offset == -0.02
        assert result.smooth_offset == pytest.approx(0.012)
        assert result.emotion is Emotion.NEUTRAL

    def test_single_outlier_damped(self):
        analyzer = MouthAnalyzer()
        for _ in range(4):
            analyzer.analyze(0.0)
        assert analyzer.analyze(0.05).emotion is Emotion.NEUTRAL
