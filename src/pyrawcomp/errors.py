from __future__ import annotations


class CompressionError(Exception):
    """Base class for waveform compression errors."""

    pass


class ConfigurationError(CompressionError, ValueError):
    """Error thrown when a compression mode or codec cannot be handled.

    Raised, for example, when decoding data labeled with an unknown
    compression mode or when parsing a malformed codec declaration.
    """

    pass


class CorruptDataError(CompressionError, RuntimeError):
    """Error thrown when encoded data cannot be decoded.

    Typical causes are coded words without any set bit, block metadata
    pointing outside of the waveform or encoded streams that end before the
    expected number of samples has been decoded.
    """

    pass
