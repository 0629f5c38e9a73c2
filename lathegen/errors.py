class LathegenError(ValueError):
    """Base class for every failure raised while constructing a piece."""


class FaceResolutionError(LathegenError):
    """The seed face of a disk could not be located, directly or via its twin."""


class InvalidProfileStep(LathegenError):
    """A profile step has a non-positive extrusion distance or a bad scale."""

    def __init__(self, index, step, reason):
        self.index = index
        self.step = step
        super().__init__(f"Profile step {index} {step!r} is invalid: {reason}")


class ResolutionOutOfRange(LathegenError):
    """A cross-section needs at least three sides."""

    def __init__(self, resolution, minimum=3):
        self.resolution = resolution
        self.minimum = minimum
        super().__init__(
            f"Resolution {resolution!r} is out of range, a polygon needs at least {minimum} sides."
        )


class StaleFaceHandle(LathegenError):
    """A face handle was used after its face was replaced, or in a foreign mesh."""
