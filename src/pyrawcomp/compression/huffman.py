"""Huffman-style variable-length coding of waveform differences.

The signal is stored as a sequence of 16-bit words. The first word is always
the first sample. Differences between adjacent samples are then encoded with
the following fixed prefix code, packed from the most significant bit
downwards into words with bit 15 set::

    0 for 4 samples in a row  1
    0                         01
    +1                        001
    -1                        0001
    +2                        00001
    -2                        000001
    +3                        0000001
    -3                        00000001

Unused low bits of a coded word are left to zero. Samples that differ by more
than 3 from the previous one are stored as literal words, with bit 15 clear
and bit 14 flagging negative values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar

import numba
import numpy as np
from numpy import int32, int64, uint16
from numpy.typing import NDArray

from ..errors import CorruptDataError
from .base import CompressionMode, WaveformCodec, as_signal

log = logging.getLogger(__name__)

CODED_FLAG = 0x8000
"""Bit flagging a word holding delta codes."""
NEGATIVE_FLAG = 0x4000
"""Bit flagging a negative literal value."""
MAX_LITERAL = 0x3FFF
"""Largest absolute value that fits into a literal word."""

# code width by difference, indexed by diff + 3
_delta_code_width = np.array([8, 6, 4, 2, 3, 5, 7], dtype=int64)
# signal difference by number of zero bits before a set bit
_zerogap_delta = np.array([0, 0, 1, -1, 2, -2, 3, -3], dtype=int64)
# maximum number of samples decoded from a single coded word
_max_samples_per_word = 4 * 15


@dataclass(frozen=True)
class Huffman(WaveformCodec):
    """Huffman-style coding of waveform differences.

    Examples
    --------
    >>> from pyrawcomp.compression import Huffman
    >>> Huffman().codec
    'huffman'
    """

    mode: ClassVar[CompressionMode] = CompressionMode.HUFFMAN


def encode(sig_in: NDArray, sig_out: NDArray[uint16] = None) -> NDArray[uint16]:
    """Compress a digital signal with Huffman-style coding of its differences.

    Wraps :func:`._huffman_encode`. Resizes the encoded array to its actual
    length.

    Note
    ----
    All samples must be representable as 16-bit integers and samples
    stored as literal words (see module documentation) must have an absolute
    value not larger than :data:`MAX_LITERAL`.

    Parameters
    ----------
    sig_in
        array of integers holding the input signal.
    sig_out
        pre-allocated unsigned 16-bit integer array for the compressed signal.
        Must be large enough to hold it: ``2 * len(sig_in) + 1`` words are
        always sufficient. If not provided, a new one will be allocated.

    Returns
    -------
    sig_out
        the encoded signal, trimmed to its actual length (a view of the given
        `sig_out`, if pre-allocated).

    Raises
    ------
    OverflowError
        if a value does not fit in the encoded word it must be stored in.

    See Also
    --------
    decode
    """
    sig_in = as_signal(sig_in)

    if len(sig_in) > 0 and (sig_in.min() < -32768 or sig_in.max() > 32767):
        raise OverflowError("signal values do not fit in 16-bit integers")

    # worst case: every sample is a literal preceded by a coded word
    max_out_len = 2 * len(sig_in) + 1

    if sig_out is None:
        sig_out = np.empty(max_out_len, dtype=uint16)
    elif sig_out.dtype != uint16:
        raise ValueError("sig_out must be of type uint16")
    elif len(sig_out) < max_out_len:
        raise ValueError(
            f"sig_out is too short ({len(sig_out)}), at least {max_out_len} "
            "words are needed"
        )

    outlen = _huffman_encode(sig_in, sig_out)

    log.debug(f"encoded {len(sig_in)} samples into {outlen} words")

    return sig_out[:outlen]


def decode(sig_in: NDArray, sig_out: NDArray = None) -> NDArray:
    """Decompress a digital signal encoded with :func:`.encode`.

    Wraps :func:`._huffman_decode`.

    The encoded stream does not store the length of the original signal. If
    `sig_out` is given, decoding stops as soon as it is full and the encoded
    stream must hold at least as many samples. Otherwise the whole stream is
    decoded.

    Parameters
    ----------
    sig_in
        array of 16-bit words holding the encoded signal.
    sig_out
        pre-allocated array for the decompressed signal, sized to the
        original signal length. If not provided, will allocate a 32-bit
        integer array.

    Returns
    -------
    sig_out
        given pre-allocated array or new array of 32-bit integers.

    Raises
    ------
    CorruptDataError
        if the encoded stream is malformed or ends before `sig_out` is full.
        Also raised if `sig_in` holds values that are not 16-bit words.
    """
    # the stream is made of 16-bit words, signed or unsigned
    sig_in = as_signal(sig_in)
    if len(sig_in) > 0 and (sig_in.min() < -32768 or sig_in.max() > 0xFFFF):
        raise CorruptDataError(
            "encoded signal holds values that are not 16-bit words"
        )
    sig_in = sig_in.astype(uint16)

    if sig_out is None:
        buf = np.empty(_max_decoded_length(len(sig_in)), dtype=int32)
        siglen = _huffman_decode(sig_in, buf)
        return buf[:siglen]

    siglen = _huffman_decode(sig_in, sig_out)

    if siglen != len(sig_out):
        raise CorruptDataError(
            f"encoded signal ended after {siglen} samples, "
            f"but {len(sig_out)} were expected"
        )

    return sig_out


def _max_decoded_length(nwords: int) -> int:
    if nwords == 0:
        return 0
    return 1 + _max_samples_per_word * (nwords - 1)


@numba.jit(nopython=True)
def _huffman_encode(
    sig_in: NDArray,
    sig_out: NDArray[uint16],
    _width: NDArray[int64] = _delta_code_width,
) -> int:
    """Encode a digital signal.

    The current coded word is kept in `word`, with `curb` pointing to the
    last bit written. A code of width ``w`` fits in the word if
    ``curb >= w``: the bit ``curb - w`` is set and becomes the new `curb`.
    Otherwise the word is flushed to the output and the code is written at
    the top of a fresh one.

    Parameters
    ----------
    sig_in
        array of integers holding the input signal.
    sig_out
        pre-allocated array for the unsigned 16-bit encoded signal, large
        enough to hold it.

    Returns
    -------
    length
        number of words in the encoded signal.
    """
    n = sig_in.size
    if n == 0:
        return 0

    sig_out[0] = int64(sig_in[0]) & 0xFFFF

    cur = 1
    word = CODED_FLAG
    curb = 15

    i = 1
    while i < n:
        diff = int64(sig_in[i]) - int64(sig_in[i - 1])

        if abs(diff) > 3:
            # flush pending codes, if any
            if curb != 15:
                sig_out[cur] = word
                cur += 1
            word = CODED_FLAG
            curb = 15

            value = int64(sig_in[i])
            if abs(value) > MAX_LITERAL:
                raise OverflowError("sample does not fit in a literal word")

            if value > 0:
                sig_out[cur] = value
            else:
                sig_out[cur] = NEGATIVE_FLAG | -value
            cur += 1
            i += 1
            continue

        step = 1
        if diff == 0:
            width = 2
            if (
                i + 3 < n
                and sig_in[i + 1] == sig_in[i]
                and sig_in[i + 2] == sig_in[i]
                and sig_in[i + 3] == sig_in[i]
            ):
                width = 1
                step = 4
        else:
            width = _width[diff + 3]

        if curb >= width:
            curb -= width
            word |= 1 << curb
        else:
            sig_out[cur] = word
            cur += 1
            curb = 15 - width
            word = CODED_FLAG | (1 << curb)

        i += step

    if curb != 15:
        sig_out[cur] = word
        cur += 1

    return cur


@numba.jit(nopython=True)
def _huffman_decode(
    sig_in: NDArray[uint16],
    sig_out: NDArray,
    _delta: NDArray[int64] = _zerogap_delta,
) -> int:
    """Decode a digital signal.

    Stops as soon as `sig_out` is full or `sig_in` is exhausted, whatever
    comes first.

    Parameters
    ----------
    sig_in
        array of unsigned 16-bit words holding the encoded signal.
    sig_out
        pre-allocated array for the decoded signal.

    Returns
    -------
    length
        number of samples written to `sig_out`.
    """
    nout = sig_out.size
    if sig_in.size == 0 or nout == 0:
        return 0

    cur_adc = int64(np.int16(sig_in[0]))
    sig_out[0] = cur_adc
    curu = 1

    i = 1
    while i < sig_in.size and curu < nout:
        word = int64(sig_in[i])

        if word & CODED_FLAG == 0:
            if word & NEGATIVE_FLAG:
                cur_adc = -(word & MAX_LITERAL)
            else:
                cur_adc = word
            sig_out[curu] = cur_adc
            curu += 1
            i += 1
            continue

        # ignore the zero padding in the lower order bits
        lowest = 0
        while lowest < 15 and (word >> lowest) & 1 == 0:
            lowest += 1
        if lowest > 14:
            raise CorruptDataError("coded word has no set bits")

        b = 14
        while b >= lowest and curu < nout:
            # count the zeros between the current bit and the next set one
            zerocnt = 0
            while (word >> (b - zerocnt)) & 1 == 0 and b - zerocnt > lowest:
                zerocnt += 1
            b -= zerocnt + 1

            if zerocnt == 0:
                s = 0
                while s < 4 and curu < nout:
                    sig_out[curu] = cur_adc
                    curu += 1
                    s += 1
            elif zerocnt < 8:
                cur_adc += _delta[zerocnt]
                sig_out[curu] = cur_adc
                curu += 1
            else:
                raise CorruptDataError("invalid delta code in coded word")

        i += 1

    return curu
