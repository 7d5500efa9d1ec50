"""Screen-anchored text labels for annotations."""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from rc_detail import config as cfg
from rc_detail.errors import InvalidParameterError, require_count, require_finite
from rc_detail.geometry.vectors import VecLike, as_vec3


@dataclass(frozen=True, eq=False)
class LabelAnchor:
    """A text label linked to a world point.

    The renderer projects `world_position` to the screen and shifts the
    text by `screen_offset` pixels (x right, y down).

    Attributes:
        world_position: Anchor point in world coordinates
        screen_offset: (x, y) pixel offset
        text: Label text
    """
    world_position: NDArray[np.float64]
    screen_offset: Tuple[float, float]
    text: str

    @classmethod
    def at(cls, position: VecLike, offset: Tuple[float, float], text: str) -> 'LabelAnchor':
        try:
            ox, oy = offset
        except (TypeError, ValueError):
            raise InvalidParameterError(f"label offset must be an (x, y) pair, got {offset!r}") from None
        return cls(
            world_position=as_vec3(position, "label position"),
            screen_offset=(require_finite("offset x", ox), require_finite("offset y", oy)),
            text=str(text),
        )


def format_dimension_value(
    value: float,
    decimals: int = cfg.DIM_DECIMALS,
    unit: str = cfg.DIM_UNIT_SUFFIX,
) -> str:
    """Format a measured length, e.g. 0.6 -> "0.60m"."""
    value = require_finite("value", value)
    decimals = require_count("decimals", decimals, minimum=0)
    return f"{value:.{decimals}f}{unit}"
