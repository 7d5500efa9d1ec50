"""Orientation: shortest-arc rotations and axis-aligned panel frames."""

from rc_detail.orientation.rotation import REFERENCE_UP, Rotation3D, orient_up_to
from rc_detail.orientation.frames import OutwardAxis, PanelFrame, panel_frame

__all__ = [
    'REFERENCE_UP',
    'Rotation3D',
    'orient_up_to',
    'OutwardAxis',
    'PanelFrame',
    'panel_frame',
]
