"""Zero suppression of digitized waveforms.

Only the "active" portions of a waveform, i.e. contiguous blocks of samples
whose absolute value exceeds a threshold, are kept. The zero-suppressed
waveform is a flat integer array with the following layout::

    [0]              original waveform length N
    [1]              number of blocks B
    [2 .. 2+B)       block start indices, ascending
    [2+B .. 2+2B)    block lengths
    [2+2B .. end)    samples of all blocks, concatenated

Decoding restores the original waveform length and fills the samples outside
of the blocks with zeros.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar

import numba
import numpy as np
from numpy import int32, int64
from numpy.typing import NDArray

from ..errors import ConfigurationError, CorruptDataError
from .base import CompressionMode, WaveformCodec, as_signal, check_fits

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZeroSuppression(WaveformCodec):
    """Zero suppression waveform codec.

    Examples
    --------
    >>> from pyrawcomp.compression import ZeroSuppression
    >>> codec = ZeroSuppression(threshold=5, nearest_neighbor=3)
    """

    mode: ClassVar[CompressionMode] = CompressionMode.ZERO_SUPPRESSION

    threshold: int = 5
    """Samples with absolute value larger than this are considered active."""

    nearest_neighbor: int | None = None
    """Blocks closer than this number of samples are merged.

    If not `None`, blocks are also padded by this number of samples on both
    sides. See :func:`.encode`.
    """

    def __post_init__(self) -> None:
        _check_params(self.threshold, self.nearest_neighbor)


@dataclass(frozen=True)
class ZeroHuffman(WaveformCodec):
    """Zero suppression followed by delta Huffman-style coding.

    See :class:`ZeroSuppression` for the meaning of the parameters and
    :mod:`.huffman` for the second stage.
    """

    mode: ClassVar[CompressionMode] = CompressionMode.ZERO_HUFFMAN

    threshold: int = 5
    nearest_neighbor: int | None = None

    def __post_init__(self) -> None:
        _check_params(self.threshold, self.nearest_neighbor)


def _check_params(threshold, nearest_neighbor) -> None:
    if threshold < 0:
        raise ConfigurationError(f"threshold must be non-negative, got {threshold}")
    if nearest_neighbor is not None and nearest_neighbor < 0:
        raise ConfigurationError(
            f"nearest_neighbor must be non-negative, got {nearest_neighbor}"
        )


def encode(
    sig_in: NDArray,
    sig_out: NDArray = None,
    threshold: int = 5,
    nearest_neighbor: int = None,
) -> NDArray[int32]:
    """Zero-suppress a digital signal.

    Wraps :func:`._find_blocks` (or :func:`._find_blocks_nn`, if
    `nearest_neighbor` is given) and :func:`._pack_blocks`.

    Without `nearest_neighbor`, a block opens at the first sample above
    threshold and closes with the first following sample at or below
    threshold, which is included in the block. With `nearest_neighbor`,
    blocks start `nearest_neighbor` samples before the first active sample,
    absorb up to `nearest_neighbor` quiet samples at their end and blocks
    closer than `nearest_neighbor` samples are merged together.

    Parameters
    ----------
    sig_in
        array of integers holding the input signal.
    sig_out
        pre-allocated array for the zero-suppressed signal. Must be large
        enough to hold it and its integer type must represent all samples
        and the signal length. If not provided, a new ``int32`` one will be
        allocated.
    threshold
        samples with absolute value above `threshold` are active.
    nearest_neighbor
        merging distance, see above.

    Returns
    -------
    sig_out
        the zero-suppressed signal, trimmed to its actual length (a view of
        the given `sig_out`, if pre-allocated).

    See Also
    --------
    decode
    """
    _check_params(threshold, nearest_neighbor)
    sig_in = as_signal(sig_in)

    # each block holds at least one sample and blocks are separated by at
    # least one sample
    max_blocks = len(sig_in) // 2 + 1
    begins = np.zeros(max_blocks, dtype=int64)
    sizes = np.zeros(max_blocks, dtype=int64)

    if nearest_neighbor is None:
        nblocks = _find_blocks(sig_in, threshold, begins, sizes)
    else:
        nblocks = _find_blocks_nn(sig_in, threshold, nearest_neighbor, begins, sizes)

    outlen = 2 + 2 * nblocks + int(sizes[:nblocks].sum())

    if sig_out is None:
        sig_out = np.empty(outlen, dtype=int32)
    elif len(sig_out) < outlen:
        raise ValueError(
            f"sig_out is too short ({len(sig_out)}) to hold the "
            f"zero-suppressed signal ({outlen})"
        )
    else:
        check_fits(np.append(sig_in, len(sig_in)), sig_out)

    _pack_blocks(sig_in, begins, sizes, nblocks, sig_out)

    log.debug(
        f"zero-suppressed {len(sig_in)} samples into {nblocks} blocks "
        f"({outlen} values)"
    )

    return sig_out[:outlen]


def decode(sig_in: NDArray, sig_out: NDArray = None) -> NDArray:
    """Restore a zero-suppressed digital signal.

    Wraps :func:`._zero_unsuppress`.

    Parameters
    ----------
    sig_in
        the zero-suppressed signal, output of :func:`.encode`.
    sig_out
        pre-allocated array for the restored signal. Its length must match the
        original signal length stored in `sig_in`. Its integer type must
        represent all stored samples. If not provided, a new ``int32`` array
        will be allocated.

    Returns
    -------
    sig_out
        given pre-allocated array or new array of 32-bit integers.

    Raises
    ------
    CorruptDataError
        if the block metadata in `sig_in` is inconsistent.
    OverflowError
        if the stored samples do not fit in the given `sig_out`.
    """
    sig_in = as_signal(sig_in)

    if len(sig_in) < 2:
        raise CorruptDataError(
            f"zero-suppressed signal must hold at least 2 values, got {len(sig_in)}"
        )

    siglen = int(sig_in[0])
    if siglen < 0:
        raise CorruptDataError(f"invalid signal length {siglen}")

    if sig_out is None:
        sig_out = np.empty(siglen, dtype=int32)
    elif len(sig_out) != siglen:
        raise ValueError(
            f"sig_out has length {len(sig_out)}, "
            f"but the original signal length is {siglen}"
        )
    else:
        nblocks = int(sig_in[1])
        if 0 <= nblocks and 2 + 2 * nblocks <= len(sig_in):
            check_fits(sig_in[2 + 2 * nblocks :], sig_out)

    _zero_unsuppress(sig_in, sig_out)

    return sig_out


@numba.jit(nopython=True)
def _is_quiet(sig_in: NDArray, i: int, threshold: int) -> bool:
    # samples past the end of the signal count as quiet
    return i >= sig_in.size or abs(int64(sig_in[i])) <= threshold


@numba.jit(nopython=True)
def _find_blocks(
    sig_in: NDArray, threshold: int, begins: NDArray[int64], sizes: NDArray[int64]
) -> int:
    """Locate the blocks of active samples.

    A block opens at the first sample above `threshold` and closes with (and
    including) the next sample at or below it. A block still open at the end
    of the signal is closed there.

    Parameters
    ----------
    sig_in
        array of integers holding the input signal.
    threshold
        zero suppression threshold.
    begins, sizes
        pre-allocated arrays filled with start index and length of each
        block.

    Returns
    -------
    nblocks
        number of blocks found.
    """
    nblocks = 0
    inblock = False

    for i in range(sig_in.size):
        if abs(int64(sig_in[i])) > threshold:
            if not inblock:
                begins[nblocks] = i
                sizes[nblocks] = 0
                inblock = True
            sizes[nblocks] += 1
        elif inblock:
            sizes[nblocks] += 1
            nblocks += 1
            inblock = False

    if inblock:
        nblocks += 1

    return nblocks


@numba.jit(nopython=True)
def _find_blocks_nn(
    sig_in: NDArray,
    threshold: int,
    nearest_neighbor: int,
    begins: NDArray[int64],
    sizes: NDArray[int64],
) -> int:
    """Locate the blocks of active samples, merging neighboring ones.

    - A block opening at sample ``i`` starts at ``max(i - nearest_neighbor,
      0)``.
    - If ``i - nearest_neighbor`` is not past ``end + 2``, with ``end`` the
      last sample of the previous block, the previous block is extended up to
      ``i`` instead.
    - A block absorbs up to `nearest_neighbor` consecutive quiet samples.
      The next quiet sample closes it (and is left out), if one of the two
      following samples is quiet too. Otherwise the sample is absorbed.
    - A block still open at the end of the signal is closed there.

    Parameters
    ----------
    sig_in
        array of integers holding the input signal.
    threshold
        zero suppression threshold.
    nearest_neighbor
        non-negative merging distance.
    begins, sizes
        pre-allocated arrays filled with start index and length of each
        block.

    Returns
    -------
    nblocks
        number of blocks found.
    """
    nblocks = 0
    inblock = False
    nquiet = 0

    for i in range(sig_in.size):
        active = abs(int64(sig_in[i])) > threshold

        if not inblock:
            if active:
                if (
                    nblocks > 0
                    and i - nearest_neighbor
                    <= begins[nblocks - 1] + sizes[nblocks - 1] + 1
                ):
                    # re-open the previous block
                    nblocks -= 1
                else:
                    begins[nblocks] = max(i - nearest_neighbor, 0)
                sizes[nblocks] = i - begins[nblocks] + 1
                inblock = True
                nquiet = 0

        elif active:
            sizes[nblocks] += 1
            nquiet = 0

        elif nquiet < nearest_neighbor:
            sizes[nblocks] += 1
            nquiet += 1

        elif _is_quiet(sig_in, i + 1, threshold) or _is_quiet(
            sig_in, i + 2, threshold
        ):
            nblocks += 1
            inblock = False
            nquiet = 0

        else:
            # activity resumes right after this sample, keep it
            sizes[nblocks] += 1

    if inblock:
        nblocks += 1

    return nblocks


@numba.jit(nopython=True)
def _pack_blocks(
    sig_in: NDArray,
    begins: NDArray[int64],
    sizes: NDArray[int64],
    nblocks: int,
    sig_out: NDArray,
) -> None:
    """Write the zero-suppressed signal layout into `sig_out`."""
    sig_out[0] = sig_in.size
    sig_out[1] = nblocks

    pos = 2 + 2 * nblocks
    for b in range(nblocks):
        sig_out[2 + b] = begins[b]
        sig_out[2 + nblocks + b] = sizes[b]
        for j in range(begins[b], begins[b] + sizes[b]):
            sig_out[pos] = sig_in[j]
            pos += 1


@numba.jit(nopython=True)
def _zero_unsuppress(sig_in: NDArray, sig_out: NDArray) -> None:
    """Fill `sig_out` with the signal encoded in zero-suppressed `sig_in`.

    `sig_out` must have the length stored in ``sig_in[0]``. Blocks must be
    ascending, not overlapping and contained in the signal, and the number of
    stored samples must match the sum of the block lengths.
    """
    nin = sig_in.size
    siglen = int64(sig_in[0])
    nblocks = int64(sig_in[1])

    if nblocks < 0 or 2 + 2 * nblocks > nin:
        raise CorruptDataError("invalid number of blocks in zero-suppressed signal")

    sig_out[:] = 0

    pos = 2 + 2 * nblocks
    last = 0
    for b in range(nblocks):
        begin = int64(sig_in[2 + b])
        size = int64(sig_in[2 + nblocks + b])

        if begin < last or size < 0 or begin + size > siglen:
            raise CorruptDataError("invalid block boundaries in zero-suppressed signal")
        if pos + size > nin:
            raise CorruptDataError("zero-suppressed signal is truncated")

        for j in range(size):
            sig_out[begin + j] = sig_in[pos]
            pos += 1

        last = begin + size

    if pos != nin:
        raise CorruptDataError(
            "zero-suppressed signal holds more samples than its blocks"
        )
