"""Tests for the Navy body-fat estimate."""

import math

import pytest

from bodylog.core.bodyfat import estimate_body_fat
from bodylog.core.entry import Sex


class TestMale:
    def test_reference_measurements(self):
        bf = estimate_body_fat("male", neck=15, waist=34, height=70)
        expected = 86.01 * math.log10(19) - 70.041 * math.log10(70) + 36.76
        assert bf == pytest.approx(expected)
        assert round(bf, 1) == 17.5

    def test_accepts_enum_and_strings(self):
        assert estimate_body_fat(Sex.MALE, "15", "34", "70") == estimate_body_fat("male", 15, 34, 70)

    def test_waist_not_above_neck(self):
        assert estimate_body_fat("male", neck=15, waist=15, height=70) is None
        assert estimate_body_fat("male", neck=16, waist=15, height=70) is None

    def test_hips_ignored(self):
        assert estimate_body_fat("male", 15, 34, 70, hips=40) == estimate_body_fat("male", 15, 34, 70)


class TestFemale:
    def test_reference_measurements(self):
        bf = estimate_body_fat("female", neck=13, waist=30, height=65, hips=38)
        assert bf == pytest.approx(28.56, abs=0.05)

    def test_requires_hips(self):
        assert estimate_body_fat("female", neck=13, waist=30, height=65) is None
        assert estimate_body_fat("female", neck=13, waist=30, height=65, hips=0) is None


class TestInsufficientData:
    @pytest.mark.parametrize(
        "neck,waist,height",
        [
            (None, 34, 70),
            (15, None, 70),
            (15, 34, None),
            (15, 34, 0),
            (-15, 34, 70),
            ("", 34, 70),
            (float("nan"), 34, 70),
        ],
    )
    def test_missing_or_invalid_inputs(self, neck, waist, height):
        assert estimate_body_fat("male", neck, waist, height) is None

    def test_unknown_sex(self):
        assert estimate_body_fat("other", 15, 34, 70) is None


class TestPlausibility:
    def test_too_high_is_rejected(self):
        assert estimate_body_fat("male", neck=10, waist=80, height=20) is None

    def test_negative_is_rejected(self):
        assert estimate_body_fat("male", neck=17, waist=18, height=80) is None

    def test_deterministic(self):
        first = estimate_body_fat("female", 13, 30, 65, 38)
        assert all(estimate_body_fat("female", 13, 30, 65, 38) == first for _ in range(5))
