"""
Silhouette data for lathe-built pieces.

A ``Profile`` is an ordered list of ``ProfileStep`` values read bottom to top.
Each step scales the current footprint and then extrudes it upwards. Piece
types differ only in their top profile; the base profile is shared and scales
with the base diameter.
"""
import math
from dataclasses import dataclass
from typing import Tuple

from lathegen.errors import InvalidProfileStep

IDENTITY_SCALE = (1.0, 1.0)


@dataclass(frozen=True)
class ProfileStep:
    """One ring of a silhouette: footprint scale (sx, sz), then extrusion."""

    radial_scale: Tuple[float, float]
    extrude_distance: float

    def validate(self, index=0):
        sx, sz = self.radial_scale
        for factor in (sx, sz):
            if not math.isfinite(factor) or factor <= 0.0:
                raise InvalidProfileStep(index, self, "scale factors must be finite and positive")
        if not math.isfinite(self.extrude_distance) or self.extrude_distance <= 0.0:
            raise InvalidProfileStep(index, self, "extrude distance must be strictly positive")


@dataclass(frozen=True)
class Profile:
    """
    Ordered silhouette steps.

    ``cap_scale`` is a last footprint scale applied after the final extrusion,
    with no extrusion of its own (used to taper the crown of a piece).
    """

    steps: Tuple[ProfileStep, ...]
    cap_scale: Tuple[float, float] = IDENTITY_SCALE
    name: str = ""

    @classmethod
    def from_pairs(cls, pairs, cap_scale=1.0, name=""):
        """
        Build a profile from ``(scale, distance)`` pairs.

        A scalar scale is applied to both footprint axes.

        Parameters:
        pairs (iterable): ``(scale, distance)`` with scale a float or (sx, sz).
        cap_scale (float or tuple): Closing footprint scale.
        name (str): Label used in logs.

        Returns:
        Profile: The new profile.
        """
        steps = tuple(ProfileStep(_as_pair(scale), float(distance)) for scale, distance in pairs)
        return cls(steps, _as_pair(cap_scale), name)

    def __len__(self):
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    @property
    def height(self):
        """Sum of extrusion distances."""
        return math.fsum(step.extrude_distance for step in self.steps)

    def validate(self):
        for index, step in enumerate(self.steps):
            step.validate(index)
        sx, sz = self.cap_scale
        if not all(math.isfinite(f) and f > 0.0 for f in (sx, sz)):
            raise InvalidProfileStep(len(self.steps), self.cap_scale, "cap scale must be finite and positive")


def _as_pair(scale):
    if isinstance(scale, (int, float)):
        return (float(scale), float(scale))
    sx, sz = scale
    return (float(sx), float(sz))


def base_profile(diameter):
    """
    Shared base of every piece: foot, collar and shaft.

    Distances are fractions of the base diameter, so the base keeps its
    proportions at any size.

    Parameters:
    diameter (float): Diameter of the seed disk.

    Returns:
    Profile: Eleven steps rising 1.4 diameters.
    """
    d = diameter
    return Profile.from_pairs(
        [
            # foot
            (1.0, 0.1 * d),
            (1.0, 0.05 * d),
            (0.8, 0.05 * d),
            (1.1, 0.05 * d),
            # collar
            (0.9, 0.05 * d),
            (0.8, 0.05 * d),
            (0.8, 0.1 * d),
            (1.2, 0.05 * d),
            # shaft
            (0.8, 0.3 * d),
            (0.8, 0.3 * d),
            (0.7, 0.3 * d),
        ],
        name="base",
    )


PAWN_TOP = Profile.from_pairs(
    [
        (1.0, 0.05),
        (1.5, 0.05),
        (1.0, 0.05),
        (0.3, 0.05),
        (1.0, 0.05),
        # head
        (2.0, 0.05),
        (1.2, 0.05),
        (1.1, 0.05),
        (1.0, 0.3),
        (0.9, 0.05),
        (0.9, 0.05),
        (0.8, 0.05),
        (0.5, 0.05),
    ],
    cap_scale=0.1,
    name="pawn",
)

ROOK_TOP = Profile.from_pairs(
    [
        (1.0, 0.05),
        (1.6, 0.1),
        (1.0, 0.4),
        # battlement
        (1.15, 0.05),
        (1.0, 0.15),
        (0.85, 0.05),
    ],
    name="rook",
)

BISHOP_TOP = Profile.from_pairs(
    [
        (1.0, 0.05),
        (1.4, 0.05),
        (0.5, 0.05),
        (1.0, 0.2),
        # mitre
        (1.8, 0.1),
        (1.1, 0.2),
        (0.9, 0.1),
        (0.7, 0.1),
        (0.5, 0.1),
        (0.4, 0.05),
    ],
    cap_scale=0.5,
    name="bishop",
)

PIECE_TOPS = {
    "pawn": PAWN_TOP,
    "rook": ROOK_TOP,
    "bishop": BISHOP_TOP,
}
