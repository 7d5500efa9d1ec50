"""Fastener placement along perimeters and post geometry."""

from rc_detail.placement.perimeter import (
    PerimeterPoint,
    circular_perimeter,
    cuboid_perimeter,
    cuboid_perimeter_count,
    rectangular_perimeter,
    rectangular_perimeter_count,
)
from rc_detail.placement.posts import build_posts

__all__ = [
    'PerimeterPoint',
    'circular_perimeter',
    'cuboid_perimeter',
    'cuboid_perimeter_count',
    'rectangular_perimeter',
    'rectangular_perimeter_count',
    'build_posts',
]
