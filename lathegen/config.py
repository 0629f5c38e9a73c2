"""
Global constants for piece construction and the turntable driver.

All runtime knobs (diameter, frequencies, camera orbit) are keyword arguments
on the functions that use them; the values below are only their defaults.

Exports:
    DEFAULT_DIAMETER (float): Base diameter of a piece in scene units.
    MIN_SIDES (int): Smallest side count of a valid cross-section.
    MIN_RESOLUTION, MAX_RESOLUTION (int): Range swept by the live regenerator.
    RESOLUTION_OMEGA (float): Angular frequency of the faceting animation (rad/s).
    ORBIT_OMEGA (float): Angular frequency of the camera orbit (rad/s).
    CAMERA_RADIUS, CAMERA_HEIGHT (float): Camera orbit geometry.
    CAMERA_TARGET, CAMERA_UP (tuple): Look-at target and up axis.
"""

DEFAULT_DIAMETER: float = 2.75

MIN_SIDES: int = 3
MIN_RESOLUTION: int = 4
MAX_RESOLUTION: int = 10

RESOLUTION_OMEGA: float = 1.0
ORBIT_OMEGA: float = 0.8

CAMERA_RADIUS: float = 10.0
CAMERA_HEIGHT: float = 4.5
CAMERA_TARGET: tuple = (0.0, 1.0, 0.0)
CAMERA_UP: tuple = (0.0, 1.0, 0.0)

# Digits kept before taking the ceiling of the resolution curve
RESOLUTION_ROUNDING: int = 9
