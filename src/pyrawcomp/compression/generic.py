from __future__ import annotations

import logging

from numpy.typing import NDArray

from ..errors import ConfigurationError
from . import huffman, zerosuppress
from .base import CompressionMode, Uncompressed, WaveformCodec, as_signal, check_fits
from .huffman import Huffman
from .zerosuppress import ZeroHuffman, ZeroSuppression

log = logging.getLogger(__name__)

_codecs = {
    CompressionMode.NONE: Uncompressed,
    CompressionMode.HUFFMAN: Huffman,
    CompressionMode.ZERO_SUPPRESSION: ZeroSuppression,
    CompressionMode.ZERO_HUFFMAN: ZeroHuffman,
}


def encode(
    sig_in: NDArray, codec: WaveformCodec | CompressionMode | str
) -> NDArray:
    """Encode a waveform with `codec`.

    Defines behaviors for each implemented waveform encoding algorithm.

    Parameters
    ----------
    sig_in
        array of integers holding the input waveform.
    codec
        algorithm to be used for encoding. String identifiers and compression
        modes select the codec with default parameters.

    Returns
    -------
    sig_out
        the encoded waveform, a new array.

    Raises
    ------
    ConfigurationError
        if `codec` is not supported.
    """
    if isinstance(codec, CompressionMode):
        codec = mode2wfcodec(codec)
    elif isinstance(codec, str):
        codec = _codec_class(codec)()

    log.debug(f"encoding waveform of length {len(sig_in)} with {codec}")

    if _is_codec(codec, Uncompressed):
        return as_signal(sig_in).copy()
    elif _is_codec(codec, Huffman):
        return huffman.encode(sig_in)
    elif _is_codec(codec, ZeroSuppression):
        return zerosuppress.encode(
            sig_in, threshold=codec.threshold, nearest_neighbor=codec.nearest_neighbor
        )
    elif _is_codec(codec, ZeroHuffman):
        return huffman.encode(
            zerosuppress.encode(
                sig_in,
                threshold=codec.threshold,
                nearest_neighbor=codec.nearest_neighbor,
            )
        )
    else:
        raise ConfigurationError(f"'{codec}' not supported")


def decode(
    sig_in: NDArray,
    codec: WaveformCodec | CompressionMode | str,
    sig_out: NDArray = None,
) -> NDArray:
    """Decode an encoded waveform.

    Defines decoding behaviors for each implemented waveform encoding
    algorithm. Codec parameters are not needed for decoding.

    Parameters
    ----------
    sig_in
        array holding the encoded waveform.
    codec
        algorithm the waveform was encoded with.
    sig_out
        pre-allocated array for the decoded waveform, sized to the original
        waveform length. Required to decode :class:`.Huffman` encoded
        waveforms to their exact length, since the encoded stream does not
        store it. Its integer type must represent all decoded values. If not
        provided, a new array is allocated.

    Returns
    -------
    sig_out
        given pre-allocated array or new array holding the decoded waveform.

    Raises
    ------
    ConfigurationError
        if `codec` is not supported.
    OverflowError
        if the decoded values do not fit in `sig_out`.
    """
    if isinstance(codec, CompressionMode):
        codec = mode2wfcodec(codec)

    log.debug(f"decoding waveform of length {len(sig_in)} with {codec}")

    if _is_codec(codec, Uncompressed):
        sig_in = as_signal(sig_in)
        if sig_out is None:
            return sig_in.copy()
        if len(sig_out) != len(sig_in):
            raise ValueError(
                f"sig_out has length {len(sig_out)}, expected {len(sig_in)}"
            )
        check_fits(sig_in, sig_out)
        sig_out[:] = sig_in
        return sig_out
    elif _is_codec(codec, Huffman):
        return huffman.decode(sig_in, sig_out)
    elif _is_codec(codec, ZeroSuppression):
        return zerosuppress.decode(sig_in, sig_out)
    elif _is_codec(codec, ZeroHuffman):
        # the length of the zero-suppressed waveform is not known in advance,
        # decode the whole stream
        return zerosuppress.decode(huffman.decode(sig_in), sig_out)
    else:
        raise ConfigurationError(f"'{codec}' not supported")


def compress(
    sig_in: NDArray,
    mode: CompressionMode | int | str,
    threshold: int = 5,
    nearest_neighbor: int = None,
) -> NDArray:
    """Compress a waveform according to a compression mode.

    Unknown modes leave the waveform uncompressed: a copy of `sig_in` is
    returned and a warning is logged.

    Parameters
    ----------
    sig_in
        array of integers holding the input waveform.
    mode
        compression mode, see :class:`.CompressionMode`.
    threshold
        zero suppression threshold, used by zero-suppressing modes.
    nearest_neighbor
        zero suppression block merging distance, used by zero-suppressing
        modes. No merging if `None`.

    Returns
    -------
    sig_out
        the compressed waveform.

    Examples
    --------
    >>> import numpy as np
    >>> from pyrawcomp import compress, uncompress, CompressionMode
    >>> wf = np.array([0, 0, 0, 6, 7, 0, 0, 0, 9, 0, 0])
    >>> enc = compress(wf, CompressionMode.ZERO_SUPPRESSION)
    >>> enc
    array([11,  2,  3,  8,  3,  2,  6,  7,  0,  9,  0], dtype=int32)
    >>> uncompress(enc, np.empty(len(wf), dtype="int16"), "ZeroSuppression")
    array([0, 0, 0, 6, 7, 0, 0, 0, 9, 0, 0], dtype=int16)
    """
    try:
        mode = CompressionMode.parse(mode)
    except ValueError:
        log.warning(f"unknown compression mode {mode!r}, waveform left uncompressed")
        mode = CompressionMode.NONE

    return encode(sig_in, mode2wfcodec(mode, threshold, nearest_neighbor))


def uncompress(
    sig_in: NDArray,
    sig_out: NDArray,
    mode: CompressionMode | int | str,
) -> NDArray:
    """Restore a waveform compressed with :func:`compress`.

    Parameters
    ----------
    sig_in
        array holding the compressed waveform.
    sig_out
        pre-allocated array for the restored waveform, sized to the original
        waveform length. If `None`, a new array is allocated.
    mode
        compression mode the waveform was compressed with.

    Returns
    -------
    sig_out
        given pre-allocated array or new array holding the restored waveform.

    Raises
    ------
    ConfigurationError
        if `mode` is not a known compression mode.
    """
    try:
        mode = CompressionMode.parse(mode)
    except ValueError as e:
        raise ConfigurationError(
            f"uncompress() does not support compression mode {mode!r}"
        ) from e

    return decode(sig_in, mode2wfcodec(mode), sig_out)


def mode2wfcodec(
    mode: CompressionMode | int | str,
    threshold: int = 5,
    nearest_neighbor: int = None,
) -> WaveformCodec:
    """Build the :class:`.WaveformCodec` implementing a compression mode.

    `threshold` and `nearest_neighbor` are only used by zero-suppressing
    modes.
    """
    codec = _codecs[CompressionMode.parse(mode)]

    if codec in (ZeroSuppression, ZeroHuffman):
        return codec(threshold=threshold, nearest_neighbor=nearest_neighbor)

    return codec()


def _codec_class(ident: str) -> type:
    for codec in _codecs.values():
        if ident == codec().codec:
            return codec

    raise ConfigurationError(f"'{ident}' is not a known codec identifier")


def _is_codec(ident: WaveformCodec | str, codec) -> bool:
    if isinstance(ident, WaveformCodec):
        return isinstance(ident, codec)
    elif isinstance(ident, str):
        return ident == codec().codec
    else:
        raise ConfigurationError(
            "input must be WaveformCodec object or string identifier"
        )
