"""
Per-tick rebuild of a piece with animated faceting and an orbiting camera.

Every tick builds a brand new mesh at the resolution for that instant and
swaps it into a ``MeshAssetStore``. Nothing is carried between ticks apart
from the published mesh, so a frame depends on the elapsed time alone.
"""
import itertools
import logging
import math
from dataclasses import dataclass

import numpy as np

from lathegen import config
from lathegen.builder import build_piece
from lathegen.profiles import PAWN_TOP

logger = logging.getLogger(__name__)


def resolution_at(t, omega=config.RESOLUTION_OMEGA, low=config.MIN_RESOLUTION, high=config.MAX_RESOLUTION):
    """
    Side count for elapsed time ``t``.

    Follows ``ceil(low + (high - low) * |sin(omega * t)|)`` clamped to
    ``[low, high]``. The curve is rounded before the ceiling so that the
    floating-point residue of ``sin`` at multiples of pi maps back to ``low``.

    Parameters:
    t (float): Elapsed time in seconds.
    omega (float): Angular frequency in rad/s.
    low, high (int): Resolution range.

    Returns:
    int: Resolution in ``[low, high]``.
    """
    curve = low + (high - low) * abs(math.sin(omega * t))
    count = math.ceil(round(curve, config.RESOLUTION_ROUNDING))
    return int(min(max(count, low), high))


@dataclass(frozen=True)
class CameraPose:
    position: tuple
    target: tuple = config.CAMERA_TARGET
    up: tuple = config.CAMERA_UP

    def view_matrix(self):
        """
        Right-handed look-at matrix (camera looks down its local -Z).

        Returns:
        numpy.ndarray: 4x4 world-to-camera transform.
        """
        eye = np.asarray(self.position, dtype=float)
        forward = np.asarray(self.target, dtype=float) - eye
        forward /= np.linalg.norm(forward)
        side = np.cross(forward, np.asarray(self.up, dtype=float))
        side /= np.linalg.norm(side)
        up = np.cross(side, forward)

        view = np.eye(4)
        view[0, :3] = side
        view[1, :3] = up
        view[2, :3] = -forward
        view[:3, 3] = -view[:3, :3] @ eye
        return view


def camera_pose_at(
    t,
    omega=config.ORBIT_OMEGA,
    radius=config.CAMERA_RADIUS,
    height=config.CAMERA_HEIGHT,
    target=config.CAMERA_TARGET,
):
    """Camera on a horizontal orbit around the vertical axis, facing ``target``."""
    angle = omega * t
    position = (radius * math.sin(angle), height, radius * math.cos(angle))
    return CameraPose(position=position, target=tuple(target))


def frame_at(
    t,
    diameter=config.DEFAULT_DIAMETER,
    top_profile=PAWN_TOP,
    resolution_omega=config.RESOLUTION_OMEGA,
    orbit_omega=config.ORBIT_OMEGA,
    **camera,
):
    """
    Mesh and camera pose for elapsed time ``t``.

    Pure: calling it twice with the same arguments gives identical meshes
    and poses.

    Returns:
    tuple: (HalfEdgeMesh, CameraPose)
    """
    mesh = build_piece(diameter, resolution_at(t, resolution_omega), top_profile)
    return mesh, camera_pose_at(t, orbit_omega, **camera)


class MeshAssetStore:
    """
    Holds the meshes shown by a host, addressed by integer handles.

    ``replace`` rebinds a single slot, so readers see either the old or the
    new mesh, never one under construction.
    """

    def __init__(self):
        self._assets = {}
        self._ids = itertools.count()

    def add(self, mesh=None):
        handle = next(self._ids)
        self._assets[handle] = mesh
        return handle

    def replace(self, handle, mesh):
        if handle not in self._assets:
            raise KeyError(f"Unknown mesh asset {handle!r}")
        self._assets[handle] = mesh

    def get(self, handle):
        return self._assets[handle]

    def __contains__(self, handle):
        return handle in self._assets

    def __len__(self):
        return len(self._assets)


class LiveRegenerator:
    """
    Tick driver: rebuilds the piece and publishes it into an asset store.

    Parameters:
    store (MeshAssetStore): Where the displayed mesh lives.
    asset (int): Handle of the displayed mesh in ``store``.
    diameter (float): Base diameter of the piece.
    top_profile (Profile): Silhouette of the piece top.
    resolution_omega (float): Frequency of the faceting animation.
    orbit_omega (float): Frequency of the camera orbit.
    **camera: ``radius``, ``height`` and ``target`` of the camera orbit.
    """

    def __init__(
        self,
        store,
        asset,
        diameter=config.DEFAULT_DIAMETER,
        top_profile=PAWN_TOP,
        resolution_omega=config.RESOLUTION_OMEGA,
        orbit_omega=config.ORBIT_OMEGA,
        **camera,
    ):
        self.store = store
        self.asset = asset
        self.diameter = diameter
        self.top_profile = top_profile
        self.resolution_omega = resolution_omega
        self.orbit_omega = orbit_omega
        self.camera = camera

        # Pose returned by skipped ticks until a frame succeeds
        self.last_pose = self.camera_pose(0.0)

    def resolution(self, t):
        return resolution_at(t, self.resolution_omega)

    def camera_pose(self, t):
        return camera_pose_at(t, self.orbit_omega, **self.camera)

    def tick(self, t):
        """
        Rebuild and publish the piece for elapsed time ``t``.

        Any failure skips the tick: the previous mesh stays published and is
        returned with the last good camera pose, and a warning is logged.
        Nothing raised while building a frame reaches the host loop.

        Returns:
        tuple: (HalfEdgeMesh or None, CameraPose)
        """
        try:
            if not math.isfinite(t):
                raise ValueError(f"Elapsed time must be finite, got {t!r}.")
            pose = self.camera_pose(t)
            mesh = build_piece(self.diameter, self.resolution(t), self.top_profile)
        except Exception as exc:
            logger.warning("Skipping tick: %s", exc, exc_info=True, extra={"tick": t})
            return self.store.get(self.asset), self.last_pose

        self.store.replace(self.asset, mesh)
        self.last_pose = pose
        return mesh, pose
