import math

import numpy as np
import pytest

from lathegen.builder import (
    apply_profile,
    build_named_piece,
    build_piece,
    make_base,
    resolve_seed_face,
)
from lathegen.errors import (
    FaceResolutionError,
    InvalidProfileStep,
    ResolutionOutOfRange,
    StaleFaceHandle,
)
from lathegen.exporter import to_trimesh
from lathegen.halfedge import create_polygon_disk
from lathegen.profiles import PAWN_TOP, PIECE_TOPS, Profile, base_profile

DIAMETER = 2.75


def _translation(offset):
    matrix = np.eye(4)
    matrix[:3, 3] = offset
    return matrix


@pytest.mark.parametrize("resolution", range(4, 11))
def test_height_does_not_depend_on_resolution(resolution):
    mesh = build_piece(DIAMETER, resolution, PAWN_TOP)
    heights = mesh.vertices[:, 1]
    expected = base_profile(DIAMETER).height + PAWN_TOP.height

    assert heights.min() == pytest.approx(-0.5 * DIAMETER)
    assert heights.max() - heights.min() == pytest.approx(expected)


def test_pawn_is_a_closed_manifold():
    mesh = build_piece(DIAMETER, 5, PAWN_TOP)
    steps = len(base_profile(DIAMETER)) + len(PAWN_TOP)

    assert mesh.n_faces == steps * 5 + 2
    assert mesh.euler_characteristic() == 2
    assert mesh.is_closed()

    sides = [mesh.face_sides(face) for face in mesh.faces()]
    assert sides.count(5) == 2
    assert sides.count(4) == steps * 5

    triangulated = to_trimesh(mesh)
    assert triangulated.is_watertight
    assert triangulated.is_winding_consistent
    assert triangulated.euler_number == 2
    assert triangulated.volume > 0.0


def test_build_piece_is_idempotent():
    first = build_piece(DIAMETER, 7, PAWN_TOP)
    second = build_piece(DIAMETER, 7, PAWN_TOP)

    assert np.array_equal(first.vertices, second.vertices)
    assert np.array_equal(first.triangles(), second.triangles())


@pytest.mark.parametrize("resolution", [3, 6, 9])
def test_every_step_keeps_the_side_count(resolution):
    mesh, face = make_base(DIAMETER, resolution)
    for step in PAWN_TOP.steps:
        face = apply_profile(mesh, face, Profile((step,)))
        assert mesh.face_sides(face) == resolution
        np.testing.assert_allclose(mesh.face_normal(face), [0.0, 1.0, 0.0], atol=1e-9)


def test_apply_profile_gives_congruent_geometry():
    profile = base_profile(1.0)
    meshes = []
    for offset in [(0.0, 0.0, 0.0), (4.0, -1.0, 2.5)]:
        mesh = create_polygon_disk(1.0, 6)
        face = mesh.find_face_at((0.0, 0.0, 0.0))
        mesh.transform(face, _translation(offset))
        apply_profile(mesh, face, profile)
        meshes.append((mesh, np.asarray(offset)))

    (first, _), (second, offset) = meshes
    np.testing.assert_allclose(second.vertices - offset, first.vertices, atol=1e-12)


def test_apply_profile_returns_the_only_live_handle():
    mesh, face = make_base(DIAMETER, 5)
    top = apply_profile(mesh, face, PAWN_TOP)

    assert mesh.face_sides(top) == 5
    with pytest.raises(StaleFaceHandle):
        apply_profile(mesh, face, PAWN_TOP)


def test_reversed_winding_falls_back_to_the_twin_face():
    ccw_mesh, ccw_top = make_base(DIAMETER, 6, winding="ccw")
    cw_mesh, cw_top = make_base(DIAMETER, 6, winding="cw")

    assert cw_top.index == 1
    assert cw_mesh.euler_characteristic() == 2
    assert cw_mesh.n_faces == ccw_mesh.n_faces
    np.testing.assert_allclose(cw_mesh.face_normal(cw_top), [0.0, 1.0, 0.0], atol=1e-9)
    np.testing.assert_allclose(
        cw_mesh.face_centroid(cw_top), ccw_mesh.face_centroid(ccw_top), atol=1e-9
    )


def test_degenerate_disk_raises_face_resolution_error():
    with pytest.raises(FaceResolutionError):
        make_base(0.0, 5)

    with pytest.raises(FaceResolutionError):
        resolve_seed_face(create_polygon_disk(0.0, 4))


def test_invalid_step_is_rejected_before_mutation():
    mesh, face = make_base(DIAMETER, 5)
    faces_before = mesh.n_faces
    broken = Profile.from_pairs([(1.0, 0.1), (0.5, 0.0)])

    with pytest.raises(InvalidProfileStep):
        apply_profile(mesh, face, broken)
    assert mesh.n_faces == faces_before
    assert mesh.face_sides(face) == 5


@pytest.mark.parametrize("resolution", [2, 0, -3, 4.5, True])
def test_resolution_out_of_range(resolution):
    with pytest.raises(ResolutionOutOfRange):
        build_piece(DIAMETER, resolution, PAWN_TOP)


def test_triangle_is_the_smallest_cross_section():
    mesh = build_piece(DIAMETER, 3, PAWN_TOP)
    assert mesh.euler_characteristic() == 2


def test_cap_scale_tapers_the_crown():
    mesh, face = make_base(DIAMETER, 8)
    top = apply_profile(mesh, face, PAWN_TOP)
    centroid = mesh.face_centroid(top)
    crown = np.linalg.norm(mesh.face_vertices(top) - centroid, axis=1)

    # shaft radius after the base, then the pawn's scales ending with 0.5 and a 0.1 cap
    shaft = 0.5 * DIAMETER * 0.8 * 1.1 * 0.9 * 0.8 * 0.8 * 1.2 * 0.8 * 0.8 * 0.7
    head = 1.5 * 0.3 * 2.0 * 1.2 * 1.1 * 0.9 * 0.9 * 0.8 * 0.5 * 0.1
    np.testing.assert_allclose(crown, shaft * head, rtol=1e-9)


@pytest.mark.parametrize("kind", sorted(PIECE_TOPS))
def test_piece_types_are_data_only(kind):
    mesh = build_named_piece(kind, DIAMETER, 6)
    steps = len(base_profile(DIAMETER)) + len(PIECE_TOPS[kind])

    assert mesh.n_faces == steps * 6 + 2
    assert mesh.euler_characteristic() == 2


def test_unknown_piece_kind():
    with pytest.raises(ValueError):
        build_named_piece("dragon")


@pytest.mark.parametrize("diameter", [math.nan, math.inf, -math.inf, -2.75])
def test_unusable_diameter_raises_face_resolution_error(diameter):
    with pytest.raises(FaceResolutionError):
        make_base(diameter, 5)

    with pytest.raises(FaceResolutionError):
        build_piece(diameter, 5, PAWN_TOP)


def test_non_finite_disk_has_no_seed_face():
    with pytest.raises(FaceResolutionError):
        resolve_seed_face(create_polygon_disk(math.nan, 5))
