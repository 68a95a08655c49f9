"""Exception hierarchy for pngshrink.

I/O failures (temp file creation, chmod, rename) are left as the OSError
the operating system raised; only codec failures get their own types.
"""


class ShrinkError(Exception):
    """Base exception for all pngshrink errors."""

    pass


class DecodeError(ShrinkError):
    """The input could not be read as an image (corrupt or unsupported)."""

    pass


class EncodeError(ShrinkError):
    """The encoder failed to produce output for a decoded image."""

    pass
