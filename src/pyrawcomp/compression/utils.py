from __future__ import annotations

import re
import sys
from dataclasses import fields

from ..errors import ConfigurationError
from .base import Uncompressed, WaveformCodec  # noqa: F401
from .generic import _codec_class
from .huffman import Huffman  # noqa: F401
from .zerosuppress import ZeroHuffman, ZeroSuppression  # noqa: F401


def str2wfcodec(expr: str) -> WaveformCodec:
    """Eval strings containing :class:`.WaveformCodec` declarations.

    Simple tool to avoid using :func:`eval`. Used to read
    :class:`.WaveformCodec` declarations configured in JSON files.

    Examples
    --------
    >>> str2wfcodec("ZeroHuffman(threshold=5, nearest_neighbor=3)")
    ZeroHuffman(threshold=5, nearest_neighbor=3)
    """
    match = re.match(r"(\w+)\((.*)\)", expr.strip())
    if match is None:
        raise ConfigurationError(f"invalid WaveformCodec expression '{expr}'")

    match = match.groups()
    codec = getattr(sys.modules[__name__], match[0].strip(), None)
    if (
        not (isinstance(codec, type) and issubclass(codec, WaveformCodec))
        or codec is WaveformCodec
    ):
        raise ConfigurationError(f"unknown WaveformCodec '{match[0].strip()}'")

    args = {}
    if match[1].strip():
        for items in match[1].split(","):
            sp = items.split("=")
            if len(sp) != 2:
                raise ConfigurationError(f"invalid WaveformCodec expression '{expr}'")

            args[sp[0].strip()] = _parse_value(sp[1].strip())

    try:
        return codec(**args)
    except TypeError as e:
        raise ConfigurationError(f"invalid WaveformCodec expression '{expr}'") from e


def dict2wfcodec(attrs: dict) -> WaveformCodec:
    """Build a :class:`.WaveformCodec` from its dictionary representation.

    Inverse of :meth:`.WaveformCodec.asdict`, useful to rebuild the codec from
    the attributes stored together with encoded data. Keys not corresponding
    to codec parameters are ignored.

    Examples
    --------
    >>> dict2wfcodec({"codec": "zero_suppression", "threshold": 10})
    ZeroSuppression(threshold=10, nearest_neighbor=None)
    """
    if "codec" not in attrs:
        raise ConfigurationError(
            "attributes do not carry any 'codec' key, I don't know how to decode it"
        )

    codec = _codec_class(attrs["codec"])
    params = {f.name for f in fields(codec)}

    return codec(**{k: v for k, v in attrs.items() if k in params})


def _parse_value(value: str) -> int | float | str | None:
    if value == "None":
        return None

    for conv in (int, float):
        try:
            return conv(value)
        except ValueError:
            pass

    return value.strip("'\"")
