"""
Painting packs: a reference image plus the zones drawn on it.

Zone coordinates are reference-normalized: (0, 0) is the top-left corner of
the painting and (1, 1) the bottom-right one. The radius is in the same units.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from pintura_sonora.utils.coords import Point

logger = logging.getLogger(__name__)


class ZoneRole(str, Enum):
    """
    Behavior of a zone. The trigger event carries only this tag.
    """

    PAD = "pad"
    EPIANO = "epiano"
    PERC = "perc"
    PATTERN_MELODY = "pattern-melody"
    PATTERN_RHYTHM = "pattern-rhythm"
    MACRO = "macro"
    ACCENT = "accent"


@dataclass(frozen=True)
class Zone:
    """
    Circular region of the painting.
    """

    id: str
    "Zone identifier, unique within a pack."
    x: float
    "Center X, 0..1."
    y: float
    "Center Y, 0..1."
    r: float
    "Radius, 0..1."
    role: ZoneRole
    "Behavior triggered by the zone."

    def __post_init__(self) -> None:
        for name in ("x", "y", "r"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Zone {self.id}: {name}={value} is outside 0..1")
        # Accept plain strings for the role
        object.__setattr__(self, "role", ZoneRole(self.role))

    def contains(self, x: float, y: float) -> bool:
        """
        Returns True when (x, y) lies inside the circle or on its border.
        """
        return Point(x, y).distance_to(Point(self.x, self.y)) <= self.r

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "x": self.x, "y": self.y, "r": self.r, "role": self.role.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Zone":
        try:
            return cls(
                id=str(data["id"]),
                x=float(data["x"]),
                y=float(data["y"]),
                r=float(data["r"]),
                role=ZoneRole(data["role"]),
            )
        except KeyError as e:
            raise ValueError(f"Zone is missing field {e}") from None


@dataclass(frozen=True)
class PaintingPack:
    """
    A painting and its zones. Zone order is the lookup priority.
    """

    id: str
    title: str
    reference_image: str
    "Path or URL of the reference image."
    zones: Tuple[Zone, ...]
    sounds: Mapping[str, str] = field(default_factory=dict)
    "Sample file per sound name (pad, epiano, click)."

    def __post_init__(self) -> None:
        object.__setattr__(self, "zones", tuple(self.zones))
        ids = [z.id for z in self.zones]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Pack {self.id}: duplicated zone ids")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "referenceImage": self.reference_image,
            "zones": [z.to_dict() for z in self.zones],
        }
        if self.sounds:
            data["sounds"] = dict(self.sounds)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PaintingPack":
        try:
            return cls(
                id=str(data["id"]),
                title=str(data.get("title", data["id"])),
                reference_image=str(data["referenceImage"]),
                zones=tuple(Zone.from_dict(z) for z in data["zones"]),
                sounds=dict(data.get("sounds", {})),
            )
        except KeyError as e:
            raise ValueError(f"Pack is missing field {e}") from None


def load_painting_pack(filename: str) -> PaintingPack:
    """
    Load a painting pack from a JSON file.

    Relative image and sound paths are resolved against the JSON file directory.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a valid pack
    """
    with open(filename, "r") as f:
        data = json.load(f)

    base_dir = os.path.dirname(os.path.abspath(filename))

    def resolve(path: str) -> str:
        if "://" in path or os.path.isabs(path):
            return path
        return os.path.join(base_dir, path)

    pack = PaintingPack.from_dict(data)
    pack = PaintingPack(
        id=pack.id,
        title=pack.title,
        reference_image=resolve(pack.reference_image),
        zones=pack.zones,
        sounds={name: resolve(path) for name, path in pack.sounds.items()},
    )
    logger.info(f"Loaded painting pack '{pack.title}' with {len(pack.zones)} zones from {filename}")
    return pack


def save_painting_pack(pack: PaintingPack, filename: str) -> None:
    """
    Save a painting pack as JSON.
    """
    with open(filename, "w") as f:
        json.dump(pack.to_dict(), f, indent=2)
    logger.info(f"Saved painting pack '{pack.title}' to {filename}")


OBRA_BOSS = PaintingPack(
    id="obra_boss",
    title="El Boss Supremo",
    reference_image="paintings/obra_boss/ref.jpg",
    zones=(
        # Walls
        Zone("wall_l", 0.18, 0.45, 0.18, ZoneRole.PAD),
        Zone("wall_r", 0.82, 0.45, 0.18, ZoneRole.PAD),
        # Ceiling
        Zone("ceiling", 0.5, 0.15, 0.15, ZoneRole.MACRO),
        # Meat
        Zone("meat", 0.52, 0.38, 0.09, ZoneRole.PATTERN_MELODY),
        # Hand
        Zone("hand", 0.65, 0.78, 0.1, ZoneRole.PATTERN_RHYTHM),
        # Knife
        Zone("knife", 0.77, 0.55, 0.06, ZoneRole.ACCENT),
        # Terminal
        Zone("cmd", 0.28, 0.65, 0.1, ZoneRole.MACRO),
    ),
)
""" Built-in pack """
