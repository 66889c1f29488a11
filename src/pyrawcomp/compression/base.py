from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import ClassVar

import numpy as np
from numpy import int32
from numpy.typing import NDArray


class CompressionMode(IntEnum):
    """Waveform compression modes.

    The numeric values are stored alongside compressed data by the caller and
    must not change.
    """

    NONE = 0
    """No compression, waveforms are copied as they are."""
    HUFFMAN = 1
    """Delta Huffman-style coding, see :mod:`.huffman`."""
    ZERO_SUPPRESSION = 2
    """Zero suppression, see :mod:`.zerosuppress`."""
    ZERO_HUFFMAN = 3
    """Zero suppression followed by delta Huffman-style coding."""

    @classmethod
    def parse(cls, mode: CompressionMode | int | str) -> CompressionMode:
        """Convert an integer or a mode name to a :class:`CompressionMode`.

        Names are matched ignoring case, underscores and the ``k`` prefix, so
        ``"ZeroHuffman"``, ``"zero_huffman"`` and ``"kZeroHuffman"`` are all
        equivalent.

        Raises
        ------
        ValueError
            if `mode` does not correspond to any compression mode.
        """
        if isinstance(mode, cls):
            return mode

        if isinstance(mode, str):
            name = mode.strip().replace("_", "").lower()
            for m in cls:
                key = m.name.replace("_", "").lower()
                if name in (key, "k" + key):
                    return m
            raise ValueError(f"unknown compression mode '{mode}'")

        # no truncation of floats, no booleans
        if isinstance(mode, bool) or not isinstance(mode, (int, np.integer)):
            raise ValueError(f"unknown compression mode {mode!r}")

        try:
            return cls(int(mode))
        except ValueError as e:
            raise ValueError(f"unknown compression mode {mode!r}") from e


@dataclass(frozen=True)
class WaveformCodec:
    """Base class identifying a waveform compression algorithm.

    The `self.codec` property returns a string identifier suitable for labeling
    encoded data on disk. This identifier is constant for all class instances.

    Note
    ----
    This is an abstract type. The user must provided a concrete subclass.
    """

    mode: ClassVar[CompressionMode]
    """The compression mode implemented by the codec."""

    @property
    def codec(self) -> str:
        """The waveform codec string identifier.

        Will be attached as an attribute to the encoded Waveform values.
        """
        return re.sub("(?<!^)(?=[A-Z])", "_", type(self).__name__).lower()

    def asdict(self) -> dict:
        """Return the codec identifier and the dataclass fields as dictionary."""
        return {"codec": self.codec} | asdict(self)


@dataclass(frozen=True)
class Uncompressed(WaveformCodec):
    """Pass-through codec, waveforms are stored as they are.

    Examples
    --------
    >>> from pyrawcomp.compression import Uncompressed
    >>> Uncompressed().codec
    'uncompressed'
    """

    mode: ClassVar[CompressionMode] = CompressionMode.NONE


def as_signal(sig_in) -> NDArray:
    """Return `sig_in` as a one-dimensional NumPy array of integers.

    Empty inputs are converted to empty ``int32`` arrays, whatever their
    original dtype.

    Raises
    ------
    ValueError
        if `sig_in` is not one-dimensional or does not hold integers.
    """
    sig = np.asarray(sig_in)

    if sig.ndim != 1:
        raise ValueError(f"expected a one-dimensional signal, got shape {sig.shape}")

    if sig.size == 0:
        return sig.astype(int32)

    if not np.issubdtype(sig.dtype, np.integer):
        raise ValueError(f"expected a signal of integers, got dtype {sig.dtype}")

    return sig


def check_fits(values: NDArray, sig_out: NDArray) -> None:
    """Check that `values` can be stored in `sig_out` without wrapping around.

    Raises
    ------
    ValueError
        if `sig_out` is not an array of integers.
    OverflowError
        if some of `values` are not representable with the dtype of
        `sig_out`.
    """
    if not np.issubdtype(sig_out.dtype, np.integer):
        raise ValueError(f"sig_out must hold integers, got dtype {sig_out.dtype}")

    if len(values) == 0:
        return

    info = np.iinfo(sig_out.dtype)
    if values.min() < info.min or values.max() > info.max:
        raise OverflowError(
            f"signal values do not fit in sig_out of type {info.dtype}"
        )
