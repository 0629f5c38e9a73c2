from lathegen.builder import apply_profile, build_named_piece, build_piece, make_base
from lathegen.errors import (
    FaceResolutionError,
    InvalidProfileStep,
    LathegenError,
    ResolutionOutOfRange,
    StaleFaceHandle,
)
from lathegen.halfedge import FaceHandle, HalfEdgeMesh, create_polygon_disk
from lathegen.profiles import (
    BISHOP_TOP,
    PAWN_TOP,
    PIECE_TOPS,
    ROOK_TOP,
    Profile,
    ProfileStep,
    base_profile,
)
from lathegen.regenerator import (
    CameraPose,
    LiveRegenerator,
    MeshAssetStore,
    camera_pose_at,
    frame_at,
    resolution_at,
)
