import numpy as np
import pytest

from pyrawcomp.compression import ZeroSuppression, zerosuppress
from pyrawcomp.errors import ConfigurationError, CorruptDataError


def _blocks(enc):
    nblocks = enc[1]
    return list(zip(enc[2 : 2 + nblocks], enc[2 + nblocks : 2 + 2 * nblocks]))


def test_zero_suppression():
    wf = np.array([0, 0, 0, 6, 7, 0, 0, 0, 9, 0, 0])
    enc = zerosuppress.encode(wf, threshold=5)

    assert enc.dtype == np.int32
    # blocks include the sample that closes them
    assert _blocks(enc) == [(3, 3), (8, 2)]
    assert list(enc) == [11, 2, 3, 8, 3, 2, 6, 7, 0, 9, 0]

    assert np.array_equal(zerosuppress.decode(enc), wf)


def test_zero_suppression_open_block():
    enc = zerosuppress.encode(np.array([0, 6, 7]), threshold=5)
    assert list(enc) == [3, 1, 1, 2, 6, 7]


def test_zero_suppression_alternating():
    wf = np.array([9, 0, 9, 0, 9])
    enc = zerosuppress.encode(wf, threshold=5)

    # adjacent blocks are never merged
    assert _blocks(enc) == [(0, 2), (2, 2), (4, 1)]
    assert len(enc) > len(wf)
    assert np.array_equal(zerosuppress.decode(enc), wf)


def test_zero_suppression_noise():
    wf = np.array([1, -2, 0, 8, 3, -1])
    enc = zerosuppress.encode(wf, threshold=5)
    assert list(enc) == [6, 1, 3, 2, 8, 3]

    # samples outside of the blocks are lost
    assert list(zerosuppress.decode(enc)) == [0, 0, 0, 8, 3, 0]


def test_zero_suppression_negative_samples():
    wf = np.array([0, -6, -20, 0, 0], dtype="int16")
    enc = zerosuppress.encode(wf, threshold=5)
    assert _blocks(enc) == [(1, 3)]
    assert np.array_equal(zerosuppress.decode(enc), wf)


def test_nearest_neighbor_merge():
    wf = np.array([0, 0, 0, 6, 7, 0, 0, 0, 9, 0, 0])
    enc = zerosuppress.encode(wf, threshold=5, nearest_neighbor=3)

    # one single block, padded down to the first sample and up to the end
    blocks = _blocks(enc)
    assert len(blocks) == 1
    begin, size = blocks[0]
    assert begin <= 3 and begin + size - 1 >= 8
    assert blocks == [(0, 11)]

    assert np.array_equal(zerosuppress.decode(enc), wf)


def test_nearest_neighbor_padding():
    wf = np.zeros(30, dtype="int16")
    wf[10] = 8
    wf[14] = 9
    wf[25] = 7

    enc = zerosuppress.encode(wf, threshold=5, nearest_neighbor=2)
    assert _blocks(enc) == [(8, 9), (23, 5)]
    assert list(enc[6:]) == [0, 0, 8, 0, 0, 0, 9, 0, 0] + [0, 0, 7, 0, 0]
    assert len(enc) == 20

    assert np.array_equal(zerosuppress.decode(enc), wf)


def test_nearest_neighbor_lookahead():
    # the quiet sample at index 2 is followed by two active ones
    wf = np.array([0, 9, 0, 9, 9, 0, 0])
    enc = zerosuppress.encode(wf, threshold=5, nearest_neighbor=0)
    assert list(enc) == [7, 1, 1, 4, 9, 0, 9, 9]
    assert np.array_equal(zerosuppress.decode(enc), wf)

    # look-ups past the end of the signal count as quiet
    enc = zerosuppress.encode(np.array([0, 0, 9, 0]), threshold=5, nearest_neighbor=0)
    assert list(enc) == [4, 1, 2, 1, 9]


def test_nearest_neighbor_open_block():
    wf = np.array([0, 0, 0, 0, 0, 7, 8])
    enc = zerosuppress.encode(wf, threshold=5, nearest_neighbor=2)
    assert _blocks(enc) == [(3, 4)]
    assert np.array_equal(zerosuppress.decode(enc), wf)


def test_empty_and_quiet():
    enc = zerosuppress.encode(np.array([], dtype="int16"))
    assert list(enc) == [0, 0]
    assert len(zerosuppress.decode(enc)) == 0

    for nn in (None, 3):
        enc = zerosuppress.encode(np.zeros(10, dtype="int16"), nearest_neighbor=nn)
        assert list(enc) == [10, 0]
        assert np.array_equal(zerosuppress.decode(enc), np.zeros(10))


def test_decode_preallocated():
    wf = np.array([0, 0, 0, 6, 7, 0, 0, 0, 9, 0, 0])
    enc = zerosuppress.encode(wf)

    sig_out = np.full(len(wf), 99, dtype="int16")
    assert zerosuppress.decode(enc, sig_out) is sig_out
    assert np.array_equal(sig_out, wf)

    with pytest.raises(ValueError):
        zerosuppress.decode(enc, np.empty(5, dtype="int16"))


def test_encode_preallocated():
    wf = np.array([0, 0, 0, 6, 7, 0, 0, 0, 9, 0, 0])
    sig_out = np.zeros(30, dtype="int32")
    enc = zerosuppress.encode(wf, sig_out)
    assert np.shares_memory(enc, sig_out)
    assert list(enc) == [11, 2, 3, 8, 3, 2, 6, 7, 0, 9, 0]

    with pytest.raises(ValueError):
        zerosuppress.encode(wf, np.zeros(5, dtype="int32"))


def test_decode_corrupt():
    corrupt = [
        [5],  # no header
        [-1, 0],  # negative length
        [5, -1],  # negative number of blocks
        [5, 2, 0],  # missing block metadata
        [5, 1, 3, 4, 1, 2, 3, 4],  # block beyond the end of the signal
        [5, 1, 0, 2, 1],  # missing samples
        [5, 1, 0, 1, 1, 2],  # extra samples
        [10, 2, 0, 1, 2, 2, 1, 2, 3, 4],  # overlapping blocks
    ]
    for enc in corrupt:
        with pytest.raises(CorruptDataError):
            zerosuppress.decode(np.array(enc))


def test_invalid_parameters():
    with pytest.raises(ValueError):
        zerosuppress.encode(np.array([1, 2, 3]), nearest_neighbor=-1)
    with pytest.raises(ConfigurationError):
        zerosuppress.encode(np.array([1, 2, 3]), threshold=-1)
    with pytest.raises(ConfigurationError):
        ZeroSuppression(nearest_neighbor=-2)
    with pytest.raises(ValueError):
        zerosuppress.encode(np.array([1.5, 2.0]))
    with pytest.raises(ValueError):
        zerosuppress.encode(np.zeros((2, 2), dtype="int16"))


def test_pulse(pulse, noisy_pulse):
    for nn in (None, 0, 3, 10):
        enc = zerosuppress.encode(pulse, threshold=5, nearest_neighbor=nn)
        assert len(enc) < len(pulse)
        assert np.array_equal(zerosuppress.decode(enc), pulse)

        enc = zerosuppress.encode(noisy_pulse, threshold=5, nearest_neighbor=nn)
        dec = zerosuppress.decode(enc)

        # active samples are restored, the rest is either kept or zeroed
        active = np.abs(noisy_pulse) > 5
        assert np.array_equal(dec[active], noisy_pulse[active])
        assert np.all((dec == noisy_pulse) | (dec == 0))


def test_narrow_output():
    wf = np.array([0, 200, 0])

    with pytest.raises(OverflowError):
        zerosuppress.encode(wf, np.zeros(10, dtype="int8"))
    with pytest.raises(ValueError):
        zerosuppress.encode(wf, np.zeros(10, dtype="float64"))

    enc = zerosuppress.encode(wf)
    with pytest.raises(OverflowError):
        zerosuppress.decode(enc, np.empty(3, dtype="int8"))
    assert list(zerosuppress.decode(enc, np.empty(3, dtype="int16"))) == [0, 200, 0]

    # the signal length is stored too
    long_wf = np.zeros(40000, dtype="int16")
    with pytest.raises(OverflowError):
        zerosuppress.encode(long_wf, np.zeros(10, dtype="int16"))
