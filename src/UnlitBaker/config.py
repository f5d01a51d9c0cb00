"""Define typed configuration models for the unlit baker.

Use `BakeConfig` to load, validate, and persist runtime settings.
"""

import dataclasses
import logging
import math
import os
import threading
from dataclasses import dataclass, field

import yaml

logger = logging.getLogger("unlit_baker.config")

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class CompositeConfig:
    """Store settings for the channel compositor."""

    lighten: float = 0.0  # [0, 1], added to base-color RGB
    solid_color_fallback: bool = True


@dataclass
class SinkConfig:
    """Store settings for encoding baked textures."""

    jpeg_quality: int = 95
    png_optimize: bool = True


@dataclass
class AltMaterialConfig:
    """Store settings for writing the glTF copy that references baked textures."""

    enabled: bool = False
    roughness_factor: float = 0.9
    metallic_factor: float = 0.0


_SUPPORTED_CONFIG_VERSION = 1


@dataclass
class BakeConfig:
    """Master bake configuration."""

    config_version: int = 1
    output_dir: str = ""  # empty -> the asset's own directory
    max_workers: int = 1
    max_image_pixels: int = 67108864  # 8192x8192
    log_level: str = "INFO"
    log_file: str = ""

    composite: CompositeConfig = field(default_factory=CompositeConfig)
    sink: SinkConfig = field(default_factory=SinkConfig)
    alt_materials: AltMaterialConfig = field(default_factory=AltMaterialConfig)

    @classmethod
    def from_yaml(cls, path: str) -> "BakeConfig":
        """Load bake configuration from YAML or return defaults."""
        if not os.path.exists(path):
            logger.info("Config file '%s' not found. Using defaults.", path)
            config = cls()
            config.validate()
            return config
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(
                f"Failed to parse YAML config '{path}': {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise ValueError(
                f"Config file '{path}' must contain a YAML mapping, "
                f"got {type(data).__name__}"
            )
        yaml_version = data.get("config_version", 1)
        if isinstance(yaml_version, int) and yaml_version > _SUPPORTED_CONFIG_VERSION:
            logger.warning(
                "Config file '%s' has config_version=%d, but this build only "
                "supports up to version %d. Some settings may be ignored.",
                path, yaml_version, _SUPPORTED_CONFIG_VERSION,
            )
        config = cls()
        _merge_dict_to_dataclass(config, data)
        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"{path}: {exc}") from exc
        return config

    def to_yaml(self, path: str):
        """Write bake configuration to a YAML file."""
        data = dataclasses.asdict(self)
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        ext = os.path.splitext(path)[1]
        tmp_path = f"{path}.tmp.{os.getpid()}.{threading.get_ident()}{ext}"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass

    def validate(self):
        """Validate all settings, raising one `ValueError` listing every problem."""
        errors = []

        if self.config_version < 1:
            errors.append("config_version must be >= 1")
        if not (1 <= self.max_workers <= 64):
            errors.append("max_workers must be in [1, 64]")
        if self.max_image_pixels < 0:
            errors.append("max_image_pixels must be >= 0 (0 = unlimited)")
        if str(self.log_level).upper() not in _VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of {sorted(_VALID_LOG_LEVELS)}")

        # Composite
        lighten = self.composite.lighten
        if not math.isfinite(lighten) or not (0.0 <= lighten <= 1.0):
            errors.append(f"composite.lighten must be in [0, 1], got {lighten}")

        # Sink
        if not (1 <= self.sink.jpeg_quality <= 100):
            errors.append("sink.jpeg_quality must be in [1, 100]")

        # Alt materials
        if not (0.0 <= self.alt_materials.roughness_factor <= 1.0):
            errors.append("alt_materials.roughness_factor must be in [0, 1]")
        if not (0.0 <= self.alt_materials.metallic_factor <= 1.0):
            errors.append("alt_materials.metallic_factor must be in [0, 1]")

        if self.alt_materials.enabled and not self.composite.solid_color_fallback:
            logger.warning(
                "Alt materials are enabled with solid_color_fallback disabled; "
                "materials without a base color map will not be linked to the "
                "factor color."
            )

        if errors:
            raise ValueError(
                "Configuration validation failed:\n" +
                "\n".join(f"  - {e}" for e in errors)
            )


def _merge_dict_to_dataclass(obj, data: dict, _path: str = ""):
    for key, value in data.items():
        full_key = f"{_path}{key}"
        if not hasattr(obj, key):
            logger.warning("Unknown config key ignored: '%s'", full_key)
            continue
        field_val = getattr(obj, key)
        if dataclasses.is_dataclass(field_val) and isinstance(value, dict):
            _merge_dict_to_dataclass(field_val, value, f"{full_key}.")
            continue
        if value is None:
            logger.warning(
                "Config key '%s' is null but field default is %s. Using default value.",
                full_key, type(field_val).__name__,
            )
            continue
        expected_type = type(field_val)
        # Allow int->float promotion and exact-integer float->int promotion.
        if (not isinstance(value, expected_type)
                and not (expected_type is float
                         and isinstance(value, int)
                         and not isinstance(value, bool))
                and not (expected_type is int
                         and isinstance(value, float)
                         and math.isfinite(value)
                         and value == int(value))):
            logger.warning(
                "Config type mismatch for '%s': expected %s, got %s (%r). "
                "Using default value.",
                full_key, expected_type.__name__, type(value).__name__, value,
            )
            continue
        if expected_type is int and isinstance(value, float):
            value = int(value)
        elif expected_type is float and isinstance(value, int):
            value = float(value)
        setattr(obj, key, value)
