"""
Errors raised while decoding Aseprite documents.
"""


class AseError(ValueError):
    """Base class for document decoding errors."""


class MalformedFormat(AseError):
    """The file is structurally invalid (bad magic, bad length, bad reference)."""


class UnsupportedFeature(AseError):
    """The file uses a field combination this decoder does not implement."""
