"""Shared fixtures: small square sites near Amsterdam and metric offsets."""

import pytest

from services.site_engine.geodesy import destination
from services.site_engine.rectangles import build_rect

CENTER = (4.895168, 52.370216)


def offset_point(origin, east_m=0.0, north_m=0.0):
    """Point *east_m* / *north_m* meters away from *origin*."""
    return destination(destination(origin, north_m, 0), east_m, 90)


@pytest.fixture
def center():
    return CENTER


@pytest.fixture
def offset():
    return offset_point


@pytest.fixture
def square_site():
    """Factory: square site of *side_m* meters centered on CENTER."""
    def make(side_m, at=CENTER):
        return build_rect(at, side_m, side_m, 0, {"role": "site"})
    return make


@pytest.fixture
def block():
    """Factory: block feature of the given size at a point."""
    def make(at, width=20.0, height=20.0, rotation=0.0, type_id="t"):
        return build_rect(at, width, height, rotation, {"role": "block", "type": type_id})
    return make
