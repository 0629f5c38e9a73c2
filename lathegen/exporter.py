import json
import logging
import os

import trimesh as trm
from tqdm import tqdm

from lathegen import config
from lathegen.profiles import PAWN_TOP
from lathegen.regenerator import LiveRegenerator, MeshAssetStore

logger = logging.getLogger(__name__)


def to_trimesh(mesh):
    """
    Convert a half-edge mesh into a triangulated trimesh object.

    Vertices are kept as they are (no merging or reordering), so vertex
    indices match the half-edge mesh.

    Parameters:
    mesh (HalfEdgeMesh): The mesh to convert.

    Returns:
    trimesh.Trimesh: Triangle mesh sharing the same vertices.
    """
    return trm.Trimesh(vertices=mesh.vertices, faces=mesh.triangles(), process=False)


def manifold_report(mesh):
    """
    Summarise the topology of a mesh.

    Parameters:
    mesh (HalfEdgeMesh): The mesh to check.

    Returns:
    dict: Polygon counts from the half-edge mesh and watertightness, winding
          consistency, Euler number and volume from its triangulation.
    """
    triangulated = to_trimesh(mesh)
    return {
        "vertices": mesh.n_vertices,
        "edges": mesh.n_edges,
        "faces": mesh.n_faces,
        "euler_characteristic": mesh.euler_characteristic(),
        "closed": mesh.is_closed(),
        "watertight": bool(triangulated.is_watertight),
        "winding_consistent": bool(triangulated.is_winding_consistent),
        "euler_number": int(triangulated.euler_number),
        "volume": float(triangulated.volume),
    }


def export_piece(mesh, path, file_type=None):
    """
    Write a mesh to disk in any format trimesh can export (STL, PLY, OBJ, ...).

    Parameters:
    mesh (HalfEdgeMesh): The mesh to write.
    path (str): Output file path; the format follows its extension unless
                ``file_type`` is given.
    file_type (str, optional): Explicit export format.

    Returns:
    str: The path written.
    """
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)

    to_trimesh(mesh).export(path, file_type=file_type)
    logger.info("Mesh with %d faces written to %s", mesh.n_faces, path)
    return path


def export_turntable(
    output_dir,
    times,
    diameter=config.DEFAULT_DIAMETER,
    top_profile=PAWN_TOP,
    file_type="stl",
    **settings,
):
    """
    Run the live regenerator over a sequence of times and write every frame.

    Each frame is saved as ``frame_NNNN.<file_type>``; the camera poses and
    resolutions go to ``camera.json`` in the same directory. Frames whose
    construction fails are skipped by the regenerator and not written.

    Parameters:
    output_dir (str): Directory for the frames (created if missing).
    times (iterable): Elapsed times, one per frame.
    diameter (float): Base diameter of the piece.
    top_profile (Profile): Silhouette of the piece top.
    file_type (str): Export format and file extension.
    **settings: Further ``LiveRegenerator`` keyword arguments.

    Returns:
    list: Paths of the written frames.
    """
    if not os.path.exists(output_dir):
        os.makedirs(output_dir)

    store = MeshAssetStore()
    asset = store.add()
    regenerator = LiveRegenerator(store, asset, diameter, top_profile, **settings)

    times = list(times)
    paths = []
    poses = []
    previous = None
    for frame, t in enumerate(tqdm(times, desc="Exporting frames")):
        mesh, pose = regenerator.tick(t)
        if mesh is None or mesh is previous:
            continue
        previous = mesh

        path = os.path.join(output_dir, f"frame_{frame:04d}.{file_type}")
        paths.append(export_piece(mesh, path, file_type=file_type))
        poses.append(
            {
                "frame": frame,
                "time": float(t),
                "resolution": regenerator.resolution(t),
                "file": os.path.basename(path),
                "position": [float(c) for c in pose.position],
                "target": [float(c) for c in pose.target],
                "up": [float(c) for c in pose.up],
            }
        )

    with open(os.path.join(output_dir, "camera.json"), "w") as f:
        json.dump(poses, f, indent=2)

    logger.info("Exported %d of %d frames to %s", len(paths), len(times), output_dir)
    return paths
