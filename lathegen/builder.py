"""
Build lathe-style pieces by folding profiles over a tracked face.

A piece starts as a flat regular polygon. Its addressable face is turned to
point up (+Y), then every profile step scales the face footprint and extrudes
it. The face handle returned by each extrusion is the only one passed on.
"""
import functools
import logging
import math

import numpy as np
from scipy.spatial.transform import Rotation

from lathegen import config
from lathegen.errors import FaceResolutionError, ResolutionOutOfRange
from lathegen.halfedge import UP, create_polygon_disk
from lathegen.profiles import IDENTITY_SCALE, PIECE_TOPS, base_profile

logger = logging.getLogger(__name__)

ORIGIN = np.zeros(3)


def footprint_scale(sx, sz):
    """Homogeneous scale of the horizontal footprint, height untouched."""
    return np.diag([sx, 1.0, sz, 1.0])


def construction_frame(diameter):
    """
    Transform that turns a disk from the XY plane into the base plane.

    The disk normal (+Z) is rotated onto +Y and the disk is lowered by half the
    diameter.

    Parameters:
    diameter (float): Base diameter.

    Returns:
    numpy.ndarray: 4x4 homogeneous transform.
    """
    frame = np.eye(4)
    frame[:3, :3] = Rotation.from_euler("x", -90.0, degrees=True).as_matrix()
    frame[:3, 3] = (0.0, -0.5 * diameter, 0.0)
    return frame


def check_resolution(resolution):
    if isinstance(resolution, bool) or not isinstance(resolution, (int, np.integer)):
        raise ResolutionOutOfRange(resolution, config.MIN_SIDES)
    if resolution < config.MIN_SIDES:
        raise ResolutionOutOfRange(resolution, config.MIN_SIDES)


def resolve_seed_face(mesh, point=ORIGIN):
    """
    Locate the face of a fresh disk that faces up.

    Depending on the disk winding, the half-edge nearest ``point`` borders
    either the up-facing face or its twin. The direct lookup is tried first,
    then the face across the same half-edge.

    Parameters:
    mesh (HalfEdgeMesh): Freshly generated disk.
    point (array-like): Query position, the disk centre.

    Returns:
    FaceHandle: The up-facing face.

    Raises:
    FaceResolutionError: If neither side faces up (e.g. a degenerate disk).
    """
    face = mesh.find_face_at(point, facing=UP)
    if face is not None:
        return face

    logger.debug("No up-facing face at %s, trying the twin side", point)
    halfedge = mesh.goto(point)
    face = None if halfedge is None else mesh.face_of(mesh.twin(halfedge), facing=UP)
    if face is None:
        raise FaceResolutionError(f"No usable face found at {tuple(point)} or on its twin.")
    return face


def _apply_step(mesh, face, step):
    if step.radial_scale != IDENTITY_SCALE:
        mesh.transform(face, footprint_scale(*step.radial_scale))
    return mesh.extrude(face, step.extrude_distance)


def apply_profile(mesh, face, profile):
    """
    Grow a face through every step of a profile.

    All steps are validated before the mesh is touched. Each step scales the
    footprint about its centroid (skipped for an identity scale) and extrudes
    along the face normal; the closing ``cap_scale`` is applied last.

    Parameters:
    mesh (HalfEdgeMesh): Mesh that owns ``face``.
    face (FaceHandle): Live handle of the face to grow.
    profile (Profile): Silhouette to apply.

    Returns:
    FaceHandle: Handle of the final top face.

    Raises:
    InvalidProfileStep: If any step has a non-positive distance or scale.
    """
    profile.validate()
    top = functools.reduce(functools.partial(_apply_step, mesh), profile.steps, face)
    if profile.cap_scale != IDENTITY_SCALE:
        mesh.transform(top, footprint_scale(*profile.cap_scale))
    logger.debug("Applied profile %r (%d steps)", profile.name, len(profile))
    return top


def make_base(diameter, resolution, winding="ccw"):
    """
    Build the shared base of a piece.

    Parameters:
    diameter (float): Diameter of the seed disk.
    resolution (int): Side count of every ring.
    winding (str): Winding of the seed disk's primary face, "ccw" or "cw".

    Returns:
    tuple: (HalfEdgeMesh, FaceHandle) with the handle of the top face.

    Raises:
    FaceResolutionError: If the diameter cannot give a usable seed face.
    """
    check_resolution(resolution)
    if not (math.isfinite(diameter) and diameter > 0.0):
        raise FaceResolutionError(f"A disk of diameter {diameter!r} has no usable seed face.")
    mesh = create_polygon_disk(0.5 * diameter, resolution, winding=winding)
    face = resolve_seed_face(mesh)
    mesh.transform(face, construction_frame(diameter))
    top = apply_profile(mesh, face, base_profile(diameter))
    return mesh, top


def build_piece(base_diameter, resolution, top_profile):
    """
    Build a complete piece mesh: shared base plus a piece-specific top.

    Parameters:
    base_diameter (float): Diameter of the base.
    resolution (int): Side count of every ring, at least 3.
    top_profile (Profile): Silhouette of the piece above the shaft.

    Returns:
    HalfEdgeMesh: Closed mesh of the piece.
    """
    mesh, face = make_base(base_diameter, resolution)
    apply_profile(mesh, face, top_profile)
    logger.debug(
        "Built %r piece at resolution %d: %d vertices, %d faces",
        top_profile.name, resolution, mesh.n_vertices, mesh.n_faces,
    )
    return mesh


def build_named_piece(kind, base_diameter=config.DEFAULT_DIAMETER, resolution=config.MIN_RESOLUTION):
    """Build one of the registered piece types ("pawn", "rook", ...)."""
    try:
        top_profile = PIECE_TOPS[kind]
    except KeyError:
        raise ValueError(f"Unknown piece kind {kind!r}, expected one of {sorted(PIECE_TOPS)}.") from None
    return build_piece(base_diameter, resolution, top_profile)
