"""
pyrawcomp: lossless compression of digitizer ADC waveforms.

Zero suppression and delta Huffman-style coding of raw detector waveforms,
see :mod:`pyrawcomp.compression`.
"""

from ._version import version as __version__
from .compression import CompressionMode, compress, uncompress

__all__ = ["__version__", "CompressionMode", "compress", "uncompress"]
