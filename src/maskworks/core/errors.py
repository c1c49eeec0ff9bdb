"""Exception types raised by the mask editor core.

All errors derive from :class:`MaskworksError` so hosts can catch the whole
family in one place. Messages are written to be shown to the user directly.
"""


class MaskworksError(Exception):
    """Base class for all mask editor errors."""

    pass


class ImageLoadError(MaskworksError):
    """The source image could not be decoded.

    Raised before any drawing surface exists, so no stroke input is possible
    for the failed session.
    """

    pass


class ImageTooLargeError(ImageLoadError):
    """The source image exceeds the configured pixel limit."""

    pass


class MaskEncodingError(MaskworksError):
    """The mark buffer could not be encoded into a mask raster.

    Session state is left untouched when this is raised so the user can retry
    without redrawing.
    """

    pass


class MaskDimensionError(MaskworksError):
    """A mask does not match the image it is meant to edit."""

    pass


class SessionClosedError(MaskworksError):
    """Input was sent to a session that has already completed or been cancelled."""

    pass
