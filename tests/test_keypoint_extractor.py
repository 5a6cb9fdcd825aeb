"""Unit tests for KeypointExtractor — best anchor selection and nose normalization."""

from __future__ import annotations

import numpy as np
import pytest

from conftest import make_output
from headtracker.keypoint_extractor import DEFAULT_CONFIDENCE_THRESHOLD, KeypointExtractor
from headtracker.tracked_position import TrackedPosition
from headtracker.types import InferenceResult


@pytest.fixture
def plain():
    return KeypointExtractor(mirror_output=False)


@pytest.fixture
def mirrored():
    return KeypointExtractor(mirror_output=True)


@pytest.mark.unit
class TestNormalization:
    """Nose X in model pixels becomes a clamped [0, 1] value."""

    def test_center_unmirrored(self, plain):
        assert plain.extract(make_output([(0.9, 320.0, 200.0)]), 0.1) == pytest.approx(0.5)

    def test_center_mirrored(self, mirrored):
        assert mirrored.extract(make_output([(0.9, 320.0, 200.0)]), 0.1) == pytest.approx(0.5)

    def test_right_edge_clamps_to_one(self, plain):
        assert plain.extract(make_output([(0.9, 640.0, 0.0)]), 0.5) == 1.0

    def test_right_edge_mirrored_is_zero(self, mirrored):
        assert mirrored.extract(make_output([(0.9, 640.0, 0.0)]), 0.5) == 0.0

    def test_beyond_right_edge_clamps(self, plain, mirrored):
        output = make_output([(0.9, 900.0, 0.0)])
        assert plain.extract(output, 0.5) == 1.0
        assert mirrored.extract(output, 0.5) == 0.0

    def test_negative_clamps_to_zero(self, plain):
        assert plain.extract(make_output([(0.9, -15.0, 0.0)]), 0.5) == 0.0

    def test_quarter_position(self, plain, mirrored):
        output = make_output([(0.9, 160.0, 0.0)])
        assert plain.extract(output, 0.5) == pytest.approx(0.25)
        assert mirrored.extract(output, 0.5) == pytest.approx(0.75)

    def test_uses_configured_width(self):
        extractor = KeypointExtractor(input_width=320, input_height=320, mirror_output=False)
        assert extractor.extract(make_output([(0.9, 80.0, 0.0)]), 0.5) == pytest.approx(0.25)

    def test_detection_carries_y(self, plain):
        detection = plain.find_best_detection(make_output([(0.8, 320.0, 480.0)]))
        assert detection is not None
        assert detection.y == pytest.approx(0.75)
        assert detection.score == pytest.approx(0.8)
        assert detection.anchor == 0


@pytest.mark.unit
class TestThreshold:
    """Low confidence holds the previous value verbatim."""

    def test_default_threshold_constant(self):
        assert KeypointExtractor().confidence_threshold == DEFAULT_CONFIDENCE_THRESHOLD == 0.4

    def test_all_below_threshold_holds(self, plain):
        output = make_output([(0.1, 100.0, 0.0), (0.39, 500.0, 0.0), (0.2, 50.0, 0.0)])
        assert plain.extract(output, 0.37) == 0.37

    def test_score_equal_to_threshold_holds(self, plain):
        output = make_output([(0.4, 100.0, 0.0)])
        assert plain.find_best_detection(output) is None
        assert plain.extract(output, 0.8) == 0.8

    def test_just_above_threshold_accepts(self, plain):
        output = make_output([(0.41, 64.0, 0.0)])
        assert plain.extract(output, 0.8) == pytest.approx(0.1)

    def test_custom_threshold(self):
        extractor = KeypointExtractor(confidence_threshold=0.5, mirror_output=False)
        output = make_output([(0.45, 64.0, 0.0)])
        assert extractor.extract(output, 0.3) == 0.3

    def test_zero_anchors_holds(self, plain):
        assert plain.extract(make_output([]), 0.66) == 0.66

    def test_held_value_is_idempotent(self, plain):
        output = make_output([(0.05, 100.0, 0.0)] * 10)
        value = 0.123
        for _ in range(5):
            value = plain.extract(output, value)
        assert value == 0.123


@pytest.mark.unit
class TestAnchorSelection:
    """The highest score wins; ties go to the first anchor."""

    def test_highest_score_wins(self, plain):
        output = make_output([(0.5, 64.0, 0.0), (0.95, 320.0, 0.0), (0.7, 600.0, 0.0)])
        detection = plain.find_best_detection(output)
        assert detection.anchor == 1
        assert detection.x == pytest.approx(0.5)

    def test_tie_selects_first(self, plain):
        output = make_output([(0.2, 0.0, 0.0), (0.9, 128.0, 0.0), (0.9, 512.0, 0.0)])
        detection = plain.find_best_detection(output)
        assert detection.anchor == 1
        assert detection.x == pytest.approx(0.2)

    def test_tie_break_is_reproducible(self, plain):
        output = make_output([(0.9, 128.0, 0.0), (0.9, 512.0, 0.0)])
        anchors = {plain.find_best_detection(output).anchor for _ in range(20)}
        assert anchors == {0}

    def test_nan_score_does_not_mask_valid_anchor(self, plain):
        output = make_output([(0.0, 0.0, 0.0), (0.9, 320.0, 0.0)])
        output[0, 4, 0] = np.nan
        detection = plain.find_best_detection(output)
        assert detection is not None
        assert detection.anchor == 1

    def test_nan_nose_holds(self, plain):
        output = make_output([(0.9, 0.0, 0.0)])
        output[0, 5, 0] = np.nan
        assert plain.extract(output, 0.4) == 0.4


@pytest.mark.unit
class TestNoResult:
    """Missing or malformed outputs hold the previous value."""

    def test_none_output(self, plain):
        assert plain.extract(None, 0.2) == 0.2

    def test_no_result_outcome(self, plain):
        assert plain.extract(InferenceResult.no_result("backend error"), 0.2) == 0.2

    def test_ok_outcome_is_unwrapped(self, plain):
        result = InferenceResult(output=make_output([(0.9, 320.0, 0.0)]))
        assert plain.extract(result, 0.2) == pytest.approx(0.5)

    def test_wrong_rank(self, plain):
        assert plain.extract(np.zeros((56, 10), dtype=np.float32), 0.2) == 0.2

    def test_too_few_attributes(self, plain):
        assert plain.extract(np.ones((1, 5, 10), dtype=np.float32), 0.2) == 0.2


@pytest.mark.unit
class TestUpdate:
    """update() is the writer of the tracked position."""

    def test_accepted_detection_written(self, plain):
        position = TrackedPosition()
        detection = plain.update(make_output([(0.9, 480.0, 0.0)]), position)
        assert detection is not None
        assert position.value == pytest.approx(0.75)

    def test_low_confidence_leaves_position(self, plain):
        position = TrackedPosition(0.3)
        assert plain.update(make_output([(0.1, 480.0, 0.0)]), position) is None
        assert position.value == 0.3
