import math
from dataclasses import dataclass
from typing import ClassVar, Tuple


@dataclass(frozen=True)
class Point:
    """
    Class to represent a 2D point.
    Instances are immutable. Helpers always return a new instance.

    A point carries no information about its coordinate space: callers
    keep frame pixels, frame-normalized and reference-normalized values apart.
    """

    x: float
    "X coordinate."
    y: float
    "Y coordinate."

    CENTER: ClassVar["Point"]
    "Center of a normalized space (0.5, 0.5)."

    NAN: ClassVar["Point"]
    "Unmapped point."

    @property
    def coords(self) -> Tuple[float, float]:
        """
        Returns the coordinates as a tuple (x, y).
        """
        return self.x, self.y

    def distance_to(self, other: "Point") -> float:
        """
        Returns the Euclidean distance between the point and another one.
        """
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_finite(self) -> bool:
        """
        Returns True when both coordinates are finite numbers.
        """
        return math.isfinite(self.x) and math.isfinite(self.y)

    def clamped(self, lo: float = 0.0, hi: float = 1.0) -> "Point":
        """
        Returns a new point with each axis clamped to [lo, hi].
        """
        return Point(clamp(self.x, lo, hi), clamp(self.y, lo, hi))

    def scaled(self, sx: float, sy: float) -> "Point":
        """
        Returns a new point with each axis multiplied by its own factor.
        """
        return Point(self.x * sx, self.y * sy)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"

    def __repr__(self) -> str:
        return str(self)


Point.CENTER = Point(0.5, 0.5)
Point.NAN = Point(math.nan, math.nan)


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """
    Clamp a value to the closed interval [lo, hi].
    """
    return max(lo, min(hi, value))
