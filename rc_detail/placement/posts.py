"""Fastener posts: a vertical cylinder centred on each placement point."""

import logging
from typing import Iterable, List, Optional, Union

from rc_detail.errors import require_count
from rc_detail.geometry.buffer import GeometryBuffer
from rc_detail.geometry.primitives import make_cylinder
from rc_detail.geometry.vectors import VecLike, as_vec3
from rc_detail.placement.perimeter import PerimeterPoint
from rc_detail.project_config import PostConfig

logger = logging.getLogger(__name__)


def build_posts(
    points: Iterable[Union[PerimeterPoint, VecLike]],
    height: Optional[float] = None,
    diameter: Optional[float] = None,
    segments: Optional[int] = None,
    config: Optional[PostConfig] = None,
) -> List[GeometryBuffer]:
    """One capped +Y cylinder per point, in point order.

    Sizes not given explicitly come from `config` (PostConfig defaults:
    height 1.0, diameter 0.2, 16 segments).
    """
    config = config or PostConfig()
    height = config.height if height is None else height
    diameter = config.diameter if diameter is None else diameter
    segments = require_count(
        "segments", config.radial_segments if segments is None else segments, 3
    )

    # One template; each post is a translated copy.
    template = make_cylinder(diameter / 2.0, height, segments)
    posts = []
    for point in points:
        position = point.position if isinstance(point, PerimeterPoint) else as_vec3(point, "point")
        posts.append(template.transformed(translation=position))

    logger.debug("Posts built", extra={'count': len(posts)})
    return posts
