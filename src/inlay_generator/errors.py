"""Error kinds raised by the inlay geometry pipeline.

Every error is local and synchronous: it is reported to the caller that
requested the build and leaves any previously built result untouched.
"""


class InlayError(ValueError):
    """Base class for rejected inlay inputs."""


class InvalidDimension(InlayError):
    """A numeric input is non-positive or out of range."""


class InvalidState(InlayError):
    """The section list is empty or its shares do not sum to 100."""


class DegenerateGeometry(InlayError):
    """A contour is self-intersecting, zero-area or escapes the outline."""
