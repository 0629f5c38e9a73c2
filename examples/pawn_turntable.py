#!/usr/bin/env python3
import argparse
import logging
import math

import numpy as np

from lathegen import PIECE_TOPS, build_piece
from lathegen.exporter import export_piece, export_turntable, manifold_report
from lathegen.logging_config import setup_logging


# ---------------------------------------------------------------------
# Single piece
# ---------------------------------------------------------------------

def export_single(output_path, kind="pawn", diameter=2.75, resolution=5):
    """
    Build one piece at a fixed resolution, report its topology and export it.
    """
    mesh = build_piece(diameter, resolution, PIECE_TOPS[kind])
    report = manifold_report(mesh)
    logging.getLogger("lathegen").info("Topology: %s", report)
    export_piece(mesh, output_path)


# ---------------------------------------------------------------------
# Turntable
# ---------------------------------------------------------------------

def export_animation(output_dir, kind="pawn", diameter=2.75, frames=60):
    """
    Export one full faceting cycle (pi seconds at the default frequency).
    """
    duration = math.pi
    times = np.linspace(0.0, duration, frames, endpoint=False)
    export_turntable(output_dir, times, diameter=diameter, top_profile=PIECE_TOPS[kind])


# ---------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------

if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Build a lathe-style chess piece and export it, or export a faceting turntable."
    )
    parser.add_argument("output", help="Output mesh file, or output directory with --frames")

    parser.add_argument(
        "--piece",
        default="pawn",
        choices=sorted(PIECE_TOPS),
        help="Which top profile to use",
    )
    parser.add_argument(
        "--diameter",
        type=float,
        default=2.75,
        help="Base diameter in scene units",
    )
    parser.add_argument(
        "--resolution",
        type=int,
        default=5,
        help="Side count of every ring (single piece only)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=0,
        help="Number of turntable frames; 0 exports a single piece",
    )
    parser.add_argument("--verbose", action="store_true", help="Log construction details")

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.frames > 0:
        export_animation(args.output, kind=args.piece, diameter=args.diameter, frames=args.frames)
    else:
        export_single(args.output, kind=args.piece, diameter=args.diameter, resolution=args.resolution)
