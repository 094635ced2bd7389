"""
Confidence math tests - values never leave [0, 1].
"""

import pytest

from invoice_memory.core.confidence import clamp, reinforce, decay, average


class TestClamp:
    """Test clamping into the unit interval."""

    @pytest.mark.parametrize("value", [-5.0, -0.01, 0.0, 0.333, 0.5, 0.999, 1.0, 1.2, 42.0])
    def test_clamp_stays_in_range(self, value):
        assert 0.0 <= clamp(value) <= 1.0

    def test_clamp_rounds_to_two_decimals(self):
        assert clamp(0.456) == 0.46
        assert clamp(0.1 + 0.2) == 0.3

    def test_clamp_bounds(self):
        assert clamp(-0.3) == 0.0
        assert clamp(1.7) == 1.0


class TestReinforceAndDecay:
    """Test reinforcement and decay steps."""

    def test_reinforce_default_step(self):
        assert reinforce(0.5) == 0.6

    def test_reinforce_custom_step(self):
        assert reinforce(0.5, 0.05) == 0.55

    def test_reinforce_caps_at_one(self):
        assert reinforce(0.95) == 1.0
        assert reinforce(1.0, 5.0) == 1.0

    def test_decay_default_step(self):
        assert decay(0.5) == 0.3

    def test_decay_floors_at_zero(self):
        assert decay(0.1) == 0.0
        assert decay(0.0, 3.0) == 0.0

    @pytest.mark.parametrize("start", [0.0, 0.25, 0.5, 0.9, 1.0])
    @pytest.mark.parametrize("step", [0.05, 0.1, 0.2, 0.7, 2.0])
    def test_never_leaves_unit_interval(self, start, step):
        assert 0.0 <= reinforce(start, step) <= 1.0
        assert 0.0 <= decay(start, step) <= 1.0


class TestAverage:
    """Test aggregate confidence."""

    def test_empty_sequence_is_zero(self):
        assert average([]) == 0.0

    def test_mean_rounded(self):
        assert average([0.5, 0.7]) == 0.6
        assert average([0.4, 0.5, 0.5]) == 0.47

    def test_accepts_generators(self):
        assert average(x for x in [1.0, 0.5]) == 0.75
