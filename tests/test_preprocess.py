"""
Unit tests for conversion/preprocess.py

Run with: pytest tests/test_preprocess.py -v
"""

import math

import numpy as np
import pytest

from conversion.errors import InvalidUnit
from conversion.preprocess import (
    FilterBank,
    condition_signals,
    conform_length,
    design_filters,
    filter_same,
    find_unit_multiplier,
    fir_bandpass,
    match_rate,
    normalized_band,
    resample,
)


class TestUnitMultiplier:
    @pytest.mark.parametrize(
        "unit, expected",
        [("nV", 0.001), ("uV", 1.0), ("mV", 1000.0), ("V", 1_000_000.0)],
    )
    def test_known_units(self, unit, expected):
        assert find_unit_multiplier(unit) == expected

    def test_prefix_match(self):
        """Only the prefix is compared, like the EDF header field allows"""
        assert find_unit_multiplier("uV  ") == 1.0
        assert find_unit_multiplier("mVolt") == 1000.0

    @pytest.mark.parametrize("unit", ["", "uv", "MV", "µV", "v", "Hz", "%"])
    def test_invalid_units(self, unit):
        with pytest.raises(InvalidUnit) as exc:
            find_unit_multiplier(unit)
        assert exc.value.unit == unit


class TestFirBandpass:
    def test_length_and_symmetry(self):
        b = fir_bandpass(50, 0.3 * 2 / 256, 45 * 2 / 256)
        assert b.shape == (51,)
        np.testing.assert_allclose(b, b[::-1], atol=1e-15)

    def test_matches_windowed_sinc_formula(self):
        n_order, fl, fh = 50, 0.3 * 2 / 200, 12 * 2 / 200
        b = fir_bandpass(n_order, fl, fh)

        def sinc(x):
            return 1.0 if x == 0 else math.sin(math.pi * x) / (math.pi * x)

        for i in (0, 7, 25, 49):
            h = 0.54 - 0.46 * math.cos(2 * math.pi * i / n_order)
            k = i - n_order / 2.0
            expected = h * (sinc(fh * k) * fh - sinc(fl * k) * fl)
            assert b[i] == pytest.approx(expected, rel=1e-9, abs=1e-15)

    def test_centre_tap(self):
        b = fir_bandpass(50, 0.1, 0.4)
        assert b[25] == pytest.approx(0.4 - 0.1)

    def test_normalized_band(self):
        assert normalized_band((0.3, 45.0), 256) == pytest.approx((0.3 * 2 / 256, 45 * 2 / 256))


class TestDesignFilters:
    def test_same_eog_rates(self):
        bank = design_filters(256, 200, 200)
        assert isinstance(bank, FilterBank)
        np.testing.assert_array_equal(bank.eog_left, bank.eog_right)
        np.testing.assert_array_equal(bank.eeg, fir_bandpass(50, *normalized_band((0.3, 45.0), 256)))

    def test_different_eog_rates_reuse_left_kernel(self):
        bank = design_filters(256, 200, 256)
        assert bank.eog_right is bank.eog_left
        np.testing.assert_array_equal(bank.eog_left, fir_bandpass(50, *normalized_band((0.3, 12.0), 200)))

    def test_kernels_are_read_only(self):
        bank = design_filters(256, 256, 256)
        with pytest.raises(ValueError):
            bank.eeg[0] = 1.0


class TestConditionSignals:
    def setup_method(self):
        rng = np.random.default_rng(3)
        self.x = rng.normal(0.0, 20.0, 2048)
        self.bank = design_filters(256, 256, 256)

    def test_average_of_equal_inputs(self):
        """Two identical EEG channels give that channel's filtered signal"""
        d = condition_signals(self.x, self.x, self.x, self.x,
                              multipliers=(1.0, 1.0, 1.0, 1.0), filters=self.bank)
        np.testing.assert_allclose(d.eeg, filter_same(self.x, self.bank.eeg), rtol=1e-12, atol=1e-9)

    def test_lengths_preserved(self):
        d = condition_signals(self.x, self.x, self.x[:1000], self.x[:1000],
                              multipliers=(1.0, 1.0, 1.0, 1.0), filters=self.bank)
        assert d.eeg.size == self.x.size
        assert d.eog_left.size == 1000
        assert d.eog_right.size == 1000

    def test_unit_scaling_applied_before_filtering(self):
        d_uv = condition_signals(self.x, self.x, self.x, self.x,
                                 multipliers=(1.0, 1.0, 1.0, 1.0), filters=self.bank)
        d_mv = condition_signals(self.x, self.x, self.x, self.x,
                                 multipliers=(1000.0, 1000.0, 1000.0, 1000.0), filters=self.bank)
        np.testing.assert_allclose(d_mv.eog_left, d_uv.eog_left * 1000.0, rtol=1e-9, atol=1e-6)

    def test_eeg_is_mean_of_filtered_channels(self):
        y = self.x[::-1].copy()
        d = condition_signals(self.x, y, self.x, self.x,
                              multipliers=(1.0, 0.001, 1.0, 1.0), filters=self.bank)
        expected = (filter_same(self.x, self.bank.eeg) + filter_same(y * 0.001, self.bank.eeg)) / 2.0
        np.testing.assert_allclose(d.eeg, expected, rtol=1e-12, atol=1e-9)

    def test_short_input_keeps_length(self):
        out = filter_same(np.ones(10), self.bank.eeg)
        assert out.size == 10

    def test_empty_input(self):
        assert filter_same(np.array([]), self.bank.eeg).size == 0


class TestRateMatching:
    def test_passthrough_at_target(self):
        x = np.arange(500, dtype=float)
        np.testing.assert_array_equal(match_rate(x, 100.0), x)

    def test_passthrough_uses_integer_rate(self):
        x = np.arange(500, dtype=float)
        np.testing.assert_array_equal(match_rate(x, 100.7), x)

    @pytest.mark.parametrize("fs, n, expected", [
        (256, 131072, 51200),
        (200, 6000, 3000),
        (128, 1000, math.ceil(1000 * 100 / 128)),
        (500, 12345, math.ceil(12345 / 5)),
    ])
    def test_output_length(self, fs, n, expected):
        assert match_rate(np.zeros(n), fs).size == expected

    def test_resample_preserves_low_frequency_tone(self):
        fs = 256
        t = np.arange(fs * 20) / fs
        x = np.sin(2 * np.pi * 5.0 * t)
        y = resample(100, fs, x)
        t_out = np.arange(y.size) / 100.0
        core = slice(200, -200)
        np.testing.assert_allclose(y[core], np.sin(2 * np.pi * 5.0 * t_out)[core], atol=0.02)

    def test_resample_rejects_zero_rate(self):
        with pytest.raises(ValueError):
            resample(100, 0.5, np.zeros(10))

    def test_conform_length(self):
        x = np.arange(5, dtype=float)
        np.testing.assert_array_equal(conform_length(x, 3), [0, 1, 2])
        np.testing.assert_array_equal(conform_length(x, 7), [0, 1, 2, 3, 4, 0, 0])
