"""Tests for the bounds-checked value formatter."""

import logging

import pytest
import torch

from scry.leyline import LoDTensor
from scry.tolaria import format_values


def _tensor(values, dtype):
    return LoDTensor(torch.tensor(values, dtype=dtype).reshape(-1, 1))


class TestTypeDispatch:

    def test_float32_uses_short_form(self):
        tensor = _tensor([0.5, 1.0, 0.1, -2.25], torch.float32)
        assert format_values(tensor, 0, 4) == ":0.5:1:0.1:-2.25"

    def test_float64_six_significant_digits(self):
        tensor = _tensor([3.14159265, 1e-7, 123456789.0], torch.float64)
        assert format_values(tensor, 0, 3) == ":3.14159:1e-07:1.23457e+08"

    def test_float_nan_and_inf(self):
        tensor = _tensor([float("nan"), float("inf"), float("-inf")], torch.float32)
        assert format_values(tensor, 0, 3) == ":nan:inf:-inf"

    def test_int32_and_int16_are_signed(self):
        assert format_values(_tensor([-3, 7], torch.int32), 0, 2) == ":-3:7"
        assert format_values(_tensor([-32768, 32767], torch.int16), 0, 2) == ":-32768:32767"

    def test_int64_rendered_unsigned(self):
        tensor = _tensor([-1, 0, 42, -(2**63)], torch.int64)
        assert format_values(tensor, 0, 4) == ":18446744073709551615:0:42:9223372036854775808"

    @pytest.mark.parametrize("dtype", [torch.bool, torch.uint8, torch.float16])
    def test_unsupported_type_marker(self, dtype):
        tensor = LoDTensor(torch.zeros(2, 1, dtype=dtype))
        assert format_values(tensor, 0, 2) == "unsupported type"


class TestBounds:

    def test_slice_is_flat(self):
        tensor = LoDTensor(torch.arange(6, dtype=torch.int32).reshape(3, 2))
        assert format_values(tensor, 2, 4) == ":2:3"

    def test_empty_interval(self):
        tensor = _tensor([1, 2], torch.int32)
        assert format_values(tensor, 1, 1) == ""

    def test_negative_start_is_access_violation(self):
        tensor = _tensor([1, 2], torch.int32)
        assert format_values(tensor, -1, 1) == "access violation"

    def test_end_past_numel_is_access_violation(self, caplog):
        tensor = _tensor([1, 2], torch.int32)
        with caplog.at_level(logging.DEBUG, logger="scry.tolaria.formatter"):
            assert format_values(tensor, 0, 3) == "access violation"
        assert "access violation" in caplog.text

    def test_end_equal_numel_is_fine(self):
        tensor = _tensor([1, 2], torch.int32)
        assert format_values(tensor, 0, 2) == ":1:2"
