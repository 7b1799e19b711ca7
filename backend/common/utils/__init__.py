"""Common utility functions."""

from .geo import (
    calculate_distance,
    close_ring,
    is_valid_lat_lng,
    make_point,
    point_in_ring,
    point_lat_lng,
    ring_is_closed,
)

__all__ = [
    "calculate_distance",
    "close_ring",
    "is_valid_lat_lng",
    "make_point",
    "point_in_ring",
    "point_lat_lng",
    "ring_is_closed",
]
