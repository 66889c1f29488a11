r"""Waveform compression utilities.

This subpackage collects the lossless waveform compression (encoding) and
decompression (decoding) algorithms, meant for raw digitizer ADC data.

Available waveform compression algorithms:

* :class:`.ZeroSuppression`, storing only blocks of samples above a
  threshold, optionally merging neighboring blocks.
* :class:`.Huffman`, a Huffman-style prefix code of waveform differences.
* :class:`.ZeroHuffman`, zero suppression followed by the Huffman-style
  coding of the zero-suppressed waveform.
* :class:`.Uncompressed`, no compression at all.

All waveform compression algorithms inherit from the :class:`.WaveformCodec`
abstract class and implement one of the :class:`.CompressionMode`\ s.

:func:`~.generic.compress` and :func:`~.generic.uncompress` provide a
high-level interface based on compression modes, :func:`~.generic.encode` and
:func:`~.generic.decode` the same for :class:`.WaveformCodec` objects.

>>> from pyrawcomp import compression
>>> enc = compression.encode(wf, ZeroHuffman(threshold=5))
>>> compression.decode(enc, ZeroHuffman())  # == wf
"""

from .base import CompressionMode, Uncompressed, WaveformCodec
from .generic import compress, decode, encode, mode2wfcodec, uncompress
from .huffman import Huffman
from .utils import dict2wfcodec, str2wfcodec
from .zerosuppress import ZeroHuffman, ZeroSuppression

__all__ = [
    "CompressionMode",
    "WaveformCodec",
    "Uncompressed",
    "Huffman",
    "ZeroSuppression",
    "ZeroHuffman",
    "encode",
    "decode",
    "compress",
    "uncompress",
    "mode2wfcodec",
    "str2wfcodec",
    "dict2wfcodec",
]
