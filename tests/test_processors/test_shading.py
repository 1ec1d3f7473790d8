"""Tests for axial shading construction."""

import pytest

from models.scene_types import GradientStop, RgbBytes
from processors.shading import build_interpolation_function, build_shading, build_stitching_function


def _stops(count):
    colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0), (0, 0, 0), (255, 255, 255)]
    return [
        GradientStop(
            offset=i / (count - 1) if count > 1 else 0.0,
            color=RgbBytes(red=colors[i][0], green=colors[i][1], blue=colors[i][2]),
        )
        for i in range(count)
    ]


@pytest.mark.parametrize("count", [2, 3, 4, 5, 6])
def test_stitching_function_shape(count):
    function = build_stitching_function(_stops(count))
    assert int(function.FunctionType) == 3
    assert len(function.Functions) == count - 1
    assert len(function.Bounds) == count - 2
    assert [int(v) for v in function.Encode] == [0, 1] * (count - 1)


@pytest.mark.parametrize("count", [0, 1])
def test_degenerate_gradient_is_empty(count):
    function = build_stitching_function(_stops(count))
    assert len(function.Functions) == 0
    assert len(function.Bounds) == 0
    assert len(function.Encode) == 0


def test_bounds_are_interior_offsets():
    function = build_stitching_function(_stops(3))
    assert [float(v) for v in function.Bounds] == [0.5]


def test_interpolation_function_normalizes_colors():
    start, end = _stops(2)
    function = build_interpolation_function(start, end)
    assert int(function.FunctionType) == 2
    assert [float(v) for v in function.C0] == [1.0, 0.0, 0.0]
    assert [float(v) for v in function.C1] == [0.0, 1.0, 0.0]
    assert [float(v) for v in function.Domain] == [0.0, 1.0]
    assert int(function.N) == 1


def test_build_shading():
    shading = build_shading(_stops(3), (0.0, 0.0, 100.0, 0.0))
    assert int(shading.ShadingType) == 2
    assert str(shading.ColorSpace) == "/DeviceRGB"
    assert [float(v) for v in shading.Coords] == [0.0, 0.0, 100.0, 0.0]
    assert [bool(v) for v in shading.Extend] == [True, True]
    assert len(shading.Function.Functions) == 2
