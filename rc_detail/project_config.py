"""
JSON-based project configuration for rc_detail.

Lets a viewer override the built-in look of generated details (wave
panel resolution, dimension line thickness, moment arrow sizes, ...)
without touching code.

The first file found is used (see find_config_file):
1. Explicit config path
2. .rcdetail.json in the detail's own directory
3. .rcdetail.json in the current directory
4. ~/.rcdetail.json
Missing sections and keys keep the built-in defaults (config.py).

Example .rcdetail.json:
{
    "wave": {
        "div_u": 80,
        "amplitude": 0.03
    },
    "dimensions": {
        "decimals": 3,
        "unit_suffix": " m"
    },
    "torsion": {
        "arc_angle_deg": 300.0
    }
}

Builders take the section objects (WaveConfig, DimensionConfig, ...) as
optional keyword arguments; nothing here writes module globals.
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rc_detail import config as cfg

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".rcdetail.json"


@dataclass
class WaveConfig:
    """Corrugated panel defaults."""
    div_u: int = cfg.WAVE_DIV_U
    div_v: int = cfg.WAVE_DIV_V
    amplitude: float = cfg.WAVE_AMPLITUDE
    frequency: float = cfg.WAVE_FREQUENCY


@dataclass
class DimensionConfig:
    """Dimension annotation look and label formatting."""
    line_thickness: float = cfg.DIM_LINE_THICKNESS
    arrow_size: float = cfg.DIM_ARROW_SIZE
    arrow_diameter: float = cfg.DIM_ARROW_DIAMETER
    connector_thickness: float = cfg.DIM_CONNECTOR_THICKNESS
    decimals: int = cfg.DIM_DECIMALS
    unit_suffix: str = cfg.DIM_UNIT_SUFFIX
    radial_segments: int = cfg.DIM_RADIAL_SEGMENTS
    bounds_offset: float = cfg.DIM_BOUNDS_OFFSET


@dataclass
class MomentConfig:
    """Bending moment (dotted line + arrow) look."""
    dot_spacing: float = cfg.MOMENT_DOT_SPACING
    dot_radius: float = cfg.MOMENT_DOT_RADIUS
    arrow_size: float = cfg.MOMENT_ARROW_SIZE
    arrow_diameter: float = cfg.MOMENT_ARROW_DIAMETER
    label_offset_x: float = cfg.MOMENT_LABEL_OFFSET_X
    label_offset_y: float = cfg.MOMENT_LABEL_OFFSET_Y
    radial_segments: int = cfg.MOMENT_RADIAL_SEGMENTS


@dataclass
class TorsionConfig:
    """Torsion moment (arc + tangential arrow) look."""
    arc_radius: float = cfg.TORSION_ARC_RADIUS
    arc_thickness: float = cfg.TORSION_ARC_THICKNESS
    arc_angle_deg: float = cfg.TORSION_ARC_ANGLE_DEG
    start_angle_deg: float = cfg.TORSION_START_ANGLE_DEG
    overshoot_deg: float = cfg.TORSION_OVERSHOOT_DEG
    arrow_size: float = cfg.TORSION_ARROW_SIZE
    arrow_diameter: float = cfg.TORSION_ARROW_DIAMETER
    arc_segments: int = cfg.TORSION_ARC_SEGMENTS
    tessellation: int = cfg.TORSION_TESSELLATION
    label_offset_x: float = cfg.TORSION_LABEL_OFFSET_X
    label_offset_y: float = cfg.TORSION_LABEL_OFFSET_Y


@dataclass
class AxisConfig:
    """Unit axis triad look."""
    axis_radius: float = cfg.AXIS_RADIUS
    arrow_size: float = cfg.AXIS_ARROW_SIZE
    axis_length: float = cfg.AXIS_LENGTH
    label_offset_x: float = cfg.AXIS_LABEL_OFFSET_X
    label_offset_y: float = cfg.AXIS_LABEL_OFFSET_Y
    radial_segments: int = cfg.AXIS_RADIAL_SEGMENTS


@dataclass
class PostConfig:
    """Fastener (rebar post) cylinders."""
    height: float = cfg.POST_HEIGHT
    diameter: float = cfg.POST_DIAMETER
    radial_segments: int = cfg.POST_RADIAL_SEGMENTS


_SECTIONS = {
    'wave': WaveConfig,
    'dimensions': DimensionConfig,
    'moment': MomentConfig,
    'torsion': TorsionConfig,
    'axes': AxisConfig,
    'posts': PostConfig,
}


@dataclass
class ProjectConfig:
    """Complete project configuration."""
    wave: WaveConfig = field(default_factory=WaveConfig)
    dimensions: DimensionConfig = field(default_factory=DimensionConfig)
    moment: MomentConfig = field(default_factory=MomentConfig)
    torsion: TorsionConfig = field(default_factory=TorsionConfig)
    axes: AxisConfig = field(default_factory=AxisConfig)
    posts: PostConfig = field(default_factory=PostConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        logger.info("Configuration saved to %s", path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectConfig':
        """Create configuration from a dictionary.

        Unknown sections and keys (including "_comment" entries) are
        ignored, so sample files can carry documentation.

        Args:
            data: Configuration dictionary

        Returns:
            ProjectConfig instance
        """
        config = cls()

        for section_name in _SECTIONS:
            section_data = data.get(section_name)
            if not isinstance(section_data, dict):
                continue
            section = getattr(config, section_name)
            for key, value in section_data.items():
                if hasattr(section, key):
                    setattr(section, key, value)
                elif not key.startswith('_'):
                    logger.warning("Unknown config key %s.%s ignored", section_name, key)

        return config

    @classmethod
    def from_json(cls, json_str: str) -> 'ProjectConfig':
        """Create configuration from a JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ProjectConfig':
        """Load configuration from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.info("Configuration loaded from %s", path)
        return cls.from_dict(data)


def find_config_file(
    search_dir: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Find configuration file using the search hierarchy.

    Search order:
    1. Explicit config path (if provided and existing)
    2. .rcdetail.json in `search_dir`
    3. .rcdetail.json in the current working directory
    4. ~/.rcdetail.json

    Returns:
        Path to config file if found, None otherwise
    """
    if explicit_config:
        explicit = Path(explicit_config)
        if explicit.exists():
            return explicit
        logger.warning("Explicit config not found: %s", explicit)

    if search_dir:
        local_config = Path(search_dir) / CONFIG_FILENAME
        if local_config.exists():
            return local_config

    cwd_config = Path.cwd() / CONFIG_FILENAME
    if cwd_config.exists():
        return cwd_config

    home_config = Path.home() / CONFIG_FILENAME
    if home_config.exists():
        return home_config

    return None


def load_config(
    search_dir: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> ProjectConfig:
    """Load configuration, falling back to defaults.

    An unreadable or malformed file is logged and replaced by defaults.
    """
    config_path = find_config_file(search_dir, explicit_config)

    if config_path:
        try:
            return ProjectConfig.load(config_path)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to load config %s: %s", config_path, e)

    return ProjectConfig()


def merge_configs(base: ProjectConfig, override: ProjectConfig) -> ProjectConfig:
    """Merge two configurations, with override taking precedence.

    Only values that differ from the built-in defaults are taken from
    `override`.
    """
    merged = ProjectConfig.from_dict(base.to_dict())

    for section_name, section_cls in _SECTIONS.items():
        defaults = section_cls()
        override_section = getattr(override, section_name)
        merged_section = getattr(merged, section_name)
        for f in fields(section_cls):
            value = getattr(override_section, f.name)
            if value != getattr(defaults, f.name):
                setattr(merged_section, f.name, value)

    return merged


def create_sample_config(path: Union[str, Path] = CONFIG_FILENAME) -> None:
    """Write a sample configuration file with documentation comments."""
    sample: Dict[str, Any] = {
        "_comment": "rc_detail geometry engine configuration",
        "_version": "1.0",
    }
    comments = {
        'wave': "Corrugated interface panels (grid resolution, sine shape)",
        'dimensions': "Dimension lines, arrowheads, connectors and label format",
        'moment': "Bending moment dotted line and arrow",
        'torsion': "Torsion arc, arrow and label placement",
        'axes': "Unit axis triad",
        'posts': "Fastener post cylinders",
    }
    defaults = ProjectConfig().to_dict()
    for section_name, values in defaults.items():
        sample[section_name] = {"_comment": comments[section_name], **values}

    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample, f, indent=2, ensure_ascii=False)

    logger.info("Sample configuration created: %s", path)
