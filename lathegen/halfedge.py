"""
Half-edge polygon mesh with arena face handles.

The mesh stores every edge as two oriented half-edges. Each half-edge knows its
origin vertex, its twin, the next half-edge around its face, and the face slot
it bounds. Faces live in an arena: a ``FaceHandle`` is the slot index plus the
slot's generation, so a handle whose face has been replaced by an extrusion is
rejected instead of silently pointing at the new cap.

Only the operations needed to grow lathe-like solids are provided: regular
polygon disks, spatial lookup, per-face affine transforms and extrusion.
"""
import itertools
import logging
from collections import namedtuple

import numpy as np

from lathegen.errors import StaleFaceHandle

logger = logging.getLogger(__name__)

UP = np.array([0.0, 0.0, 1.0])

FaceHandle = namedtuple("FaceHandle", ["mesh", "index", "generation"])


def _polygon_normal(points):
    """
    Unit normal of a planar polygon from its vector area.

    Returns a zero vector for degenerate or non-finite polygons.
    """
    area = 0.5 * np.cross(points, np.roll(points, -1, axis=0)).sum(axis=0)
    norm = np.linalg.norm(area)
    if not (np.isfinite(norm) and norm > 1e-12):
        return np.zeros(3)
    return area / norm


class HalfEdgeMesh:
    """
    Closed polygon mesh in half-edge form.

    Meshes are normally created by ``create_polygon_disk`` and grown with
    ``transform`` and ``extrude``. Every mesh gets a serial number that is
    stamped into the handles it issues.
    """

    _serials = itertools.count()

    def __init__(self):
        self.serial = next(HalfEdgeMesh._serials)

        self._positions = []

        self._he_origin = []
        self._he_twin = []
        self._he_next = []
        self._he_face = []

        self._face_halfedge = []
        self._face_generation = []

    # ------------------------------------------------------------------
    # Low level construction
    # ------------------------------------------------------------------

    def _add_vertex(self, position):
        self._positions.append(np.asarray(position, dtype=float))
        return len(self._positions) - 1

    def _add_halfedge(self, origin, face):
        self._he_origin.append(origin)
        self._he_twin.append(-1)
        self._he_next.append(-1)
        self._he_face.append(face)
        return len(self._he_origin) - 1

    def _add_face(self):
        self._face_halfedge.append(-1)
        self._face_generation.append(0)
        return len(self._face_halfedge) - 1

    def _set_twins(self, a, b):
        self._he_twin[a] = b
        self._he_twin[b] = a

    def _link(self, *halfedges):
        """Close the given half-edges into a loop, in order."""
        for k, he in enumerate(halfedges):
            self._he_next[he] = halfedges[(k + 1) % len(halfedges)]

    def _handle(self, slot):
        return FaceHandle(self.serial, slot, self._face_generation[slot])

    def _resolve(self, face):
        """Map a handle to its face slot, rejecting stale and foreign handles."""
        mesh, slot, generation = face
        if mesh != self.serial:
            raise StaleFaceHandle(f"Face handle {face} was issued by another mesh.")
        if not 0 <= slot < len(self._face_generation):
            raise StaleFaceHandle(f"Face handle {face} does not name a face.")
        if self._face_generation[slot] != generation:
            raise StaleFaceHandle(
                f"Face handle {face} is stale, the face is now at generation "
                f"{self._face_generation[slot]}."
            )
        return slot

    def _loop(self, slot):
        start = self._face_halfedge[slot]
        loop = [start]
        he = self._he_next[start]
        while he != start:
            loop.append(he)
            he = self._he_next[he]
        return loop

    def _slot_vertices(self, slot):
        return [self._he_origin[he] for he in self._loop(slot)]

    def _slot_normal(self, slot):
        return _polygon_normal(np.array([self._positions[v] for v in self._slot_vertices(slot)]))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def n_vertices(self):
        return len(self._positions)

    @property
    def n_edges(self):
        return len(self._he_origin) // 2

    @property
    def n_faces(self):
        return len(self._face_halfedge)

    @property
    def vertices(self):
        """numpy.ndarray: Vertex positions, shape (V, 3)."""
        if not self._positions:
            return np.zeros((0, 3))
        return np.array(self._positions)

    def euler_characteristic(self):
        return self.n_vertices - self.n_edges + self.n_faces

    def is_closed(self):
        """True when every half-edge has a twin, i.e. the surface has no boundary."""
        return all(twin >= 0 for twin in self._he_twin)

    def faces(self):
        """Handles of all faces, in allocation order."""
        return [self._handle(slot) for slot in range(self.n_faces)]

    def face_vertex_indices(self, face):
        return self._slot_vertices(self._resolve(face))

    def face_vertices(self, face):
        """
        Positions of a face's corners in winding order.

        Parameters:
        face (FaceHandle): A live handle issued by this mesh.

        Returns:
        numpy.ndarray: Array of shape (k, 3).
        """
        return np.array([self._positions[v] for v in self.face_vertex_indices(face)])

    def face_sides(self, face):
        return len(self._loop(self._resolve(face)))

    def face_centroid(self, face):
        return self.face_vertices(face).mean(axis=0)

    def face_normal(self, face):
        return _polygon_normal(self.face_vertices(face))

    def polygons(self):
        """Vertex index loops of every face, in allocation order."""
        return [self._slot_vertices(slot) for slot in range(self.n_faces)]

    def triangles(self):
        """
        Fan-triangulate every face.

        Faces built by this module are convex, so a fan from the first corner
        keeps the winding of the polygon.

        Returns:
        numpy.ndarray: Integer array of shape (T, 3).
        """
        tris = []
        for loop in self.polygons():
            for k in range(1, len(loop) - 1):
                tris.append((loop[0], loop[k], loop[k + 1]))
        return np.array(tris, dtype=np.int64).reshape(-1, 3)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def goto(self, point, tol=1e-9):
        """
        Find the half-edge nearest to a point.

        Distances are measured to half-edge midpoints. Half-edges within
        ``tol`` of the minimum are treated as equally near and the one
        allocated first wins, so the result is deterministic for symmetric
        shapes such as regular disks.

        Parameters:
        point (array-like): Query position (x, y, z).
        tol (float): Relative tolerance for ties.

        Returns:
        int or None: Index of the half-edge, or None when no midpoint has a
                     finite distance to ``point``.
        """
        positions = self.vertices
        origins = np.asarray(self._he_origin)
        targets = origins[np.asarray(self._he_next)]
        midpoints = 0.5 * (positions[origins] + positions[targets])
        distances = np.linalg.norm(midpoints - np.asarray(point, dtype=float), axis=1)
        finite = np.isfinite(distances)
        if not finite.any():
            return None
        nearest = distances[finite].min()
        return int(np.flatnonzero(finite & (distances <= nearest + tol * max(1.0, nearest)))[0])

    def twin(self, halfedge):
        return self._he_twin[halfedge]

    def face_of(self, halfedge, facing=None):
        """
        Face bounded by a half-edge.

        Parameters:
        halfedge (int): Half-edge index.
        facing (array-like, optional): When given, only a face whose normal
                                       points along this direction is returned.

        Returns:
        FaceHandle or None: The face, or None if it does not face ``facing``.
        """
        slot = self._he_face[halfedge]
        if facing is not None and not np.dot(self._slot_normal(slot), facing) > 0.0:
            return None
        return self._handle(slot)

    def find_face_at(self, point, facing=UP):
        """Face of the half-edge nearest ``point`` if it faces ``facing``."""
        halfedge = self.goto(point)
        if halfedge is None:
            return None
        return self.face_of(halfedge, facing=facing)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def transform(self, face, matrix):
        """
        Apply an affine transform to the corners of a face, in place.

        The 4x4 matrix acts in a frame centred on the face centroid: the
        linear part scales or rotates about the centroid and the translation
        part is added afterwards. Vertices shared with neighbouring faces move
        with it, so the side walls follow.

        Parameters:
        face (FaceHandle): A live handle issued by this mesh.
        matrix (array-like): Homogeneous 4x4 transform.
        """
        matrix = np.asarray(matrix, dtype=float)
        if matrix.shape != (4, 4):
            raise ValueError(f"Expected a 4x4 transform, got shape {matrix.shape}.")

        indices = self.face_vertex_indices(face)
        points = np.array([self._positions[v] for v in indices])
        centroid = points.mean(axis=0)
        moved = (points - centroid) @ matrix[:3, :3].T + matrix[:3, 3] + centroid
        for v, position in zip(indices, moved):
            self._positions[v] = position

    def extrude(self, face, distance):
        """
        Push a face out along its normal and wall in the gap.

        The face keeps its slot but moves onto a ring of new vertices offset by
        ``distance`` along its normal. Each boundary edge of the old face gets
        a quad side wall. The slot generation is bumped, so the handle passed
        in becomes stale and the returned one must be used from now on.

        Parameters:
        face (FaceHandle): A live handle issued by this mesh.
        distance (float): Offset along the face normal.

        Returns:
        FaceHandle: Handle of the new cap face.
        """
        slot = self._resolve(face)
        normal = self._slot_normal(slot)
        if not normal.any():
            raise ValueError(f"Cannot extrude degenerate face {face}.")

        loop = self._loop(slot)
        n = len(loop)
        bottom = [self._he_origin[he] for he in loop]
        top = [self._add_vertex(self._positions[v] + distance * normal) for v in bottom]

        cap = [self._add_halfedge(top[i], slot) for i in range(n)]
        rising = []
        falling = []
        for i in range(n):
            j = (i + 1) % n
            side = self._add_face()
            base = loop[i]
            self._he_face[base] = side
            up = self._add_halfedge(bottom[j], side)
            across = self._add_halfedge(top[j], side)
            down = self._add_halfedge(top[i], side)
            self._link(base, up, across, down)
            self._face_halfedge[side] = base
            self._set_twins(across, cap[i])
            rising.append(up)
            falling.append(down)

        for i in range(n):
            self._set_twins(rising[i], falling[(i + 1) % n])

        self._link(*cap)
        self._face_halfedge[slot] = cap[0]
        self._face_generation[slot] += 1
        return self._handle(slot)


def create_polygon_disk(radius, sides, winding="ccw"):
    """
    Create a flat, closed, two-faced regular polygon in the XY plane.

    The primary face is allocated first and wound according to ``winding``:
    ``"ccw"`` gives it a +Z normal, ``"cw"`` a -Z normal. The second face is
    its twin and closes the disk, so the result is a closed surface with
    Euler characteristic 2.

    Parameters:
    radius (float): Circumradius of the polygon.
    sides (int): Number of corners, at least 3.
    winding (str): "ccw" or "cw".

    Returns:
    HalfEdgeMesh: The new disk.
    """
    if sides < 3:
        raise ValueError(f"A polygon needs at least 3 sides, got {sides}.")
    if winding not in ("ccw", "cw"):
        raise ValueError(f"Winding must be 'ccw' or 'cw', got {winding!r}.")

    mesh = HalfEdgeMesh()
    for k in range(sides):
        angle = 2.0 * np.pi * k / sides
        mesh._add_vertex((radius * np.cos(angle), radius * np.sin(angle), 0.0))

    if winding == "ccw":
        order = list(range(sides))
    else:
        order = [0] + list(range(sides - 1, 0, -1))

    primary = mesh._add_face()
    back = mesh._add_face()
    front_loop = []
    back_loop = []
    for k in range(sides):
        start, end = order[k], order[(k + 1) % sides]
        front = mesh._add_halfedge(start, primary)
        rear = mesh._add_halfedge(end, back)
        mesh._set_twins(front, rear)
        front_loop.append(front)
        back_loop.append(rear)

    mesh._link(*front_loop)
    mesh._link(*reversed(back_loop))
    mesh._face_halfedge[primary] = front_loop[0]
    mesh._face_halfedge[back] = back_loop[0]

    logger.debug("Created %d-sided disk of radius %g (%s)", sides, radius, winding)
    return mesh
