"""Material and result records."""

import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Tuple


class AlphaMode(Enum):
    """Enumerate glTF material alpha modes."""

    OPAQUE = "OPAQUE"
    BLEND = "BLEND"
    MASK = "MASK"


@dataclass(frozen=True)
class ChannelRef:
    """Reference from a material slot to the image backing it."""

    texture_index: int
    image_index: int
    uri: Optional[str] = None

    @property
    def embedded(self) -> bool:
        """Return True when the image is not backed by an external file."""
        return self.uri is None or self.uri.startswith("data:")


@dataclass(frozen=True)
class MaterialDescriptor:
    """Read-only view of the material inputs the compositor needs."""

    index: int
    name: Optional[str] = None
    alpha_mode: AlphaMode = AlphaMode.OPAQUE
    base_color_factor: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    base_color_channel: Optional[ChannelRef] = None
    occlusion_strength: float = 1.0
    occlusion_channel: Optional[ChannelRef] = None
    emissive_factor: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    emissive_channel: Optional[ChannelRef] = None

    def __post_init__(self) -> None:
        """Reject factor values the 8-bit arithmetic cannot represent."""
        if len(self.base_color_factor) != 4:
            raise ValueError(
                f"base_color_factor must have 4 components, got {len(self.base_color_factor)}"
            )
        if len(self.emissive_factor) != 3:
            raise ValueError(
                f"emissive_factor must have 3 components, got {len(self.emissive_factor)}"
            )
        for label, values in (
            ("base_color_factor", self.base_color_factor),
            ("emissive_factor", self.emissive_factor),
            ("occlusion_strength", (self.occlusion_strength,)),
        ):
            if not all(math.isfinite(v) for v in values):
                raise ValueError(f"{label} must be finite, got {values}")
        if not (0.0 <= self.occlusion_strength <= 255.0):
            raise ValueError(
                f"occlusion_strength must be in [0, 255], got {self.occlusion_strength}"
            )

    @property
    def label(self) -> str:
        """Human-readable identifier used in diagnostics."""
        if self.name:
            return f"'{self.name}' (material[{self.index}])"
        return f"material[{self.index}]"


@dataclass
class MaterialResult:
    """Outcome of baking one material."""

    index: int
    ok: bool
    path: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, index: int, error: str) -> "MaterialResult":
        return cls(index=index, ok=False, error=error)

    def to_dict(self) -> dict:
        """Return dataclass fields as a plain dictionary."""
        return asdict(self)
