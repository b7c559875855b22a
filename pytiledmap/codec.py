"""
Copyright (C) 2012-2023, Leif Theden <leif.theden@gmail.com>

This file is part of pytiledmap.

pytiledmap is free software: you can redistribute it and/or modify
it under the terms of the GNU Lesser General Public License as
published by the Free Software Foundation, either version 3 of the
License, or (at your option) any later version.

pytiledmap is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU Lesser General Public License for more details.

You should have received a copy of the GNU Lesser General Public
License along with pytiledmap.  If not, see <https://www.gnu.org/licenses/>.

"""
from __future__ import annotations

import binascii
import gzip
import logging
import struct
import zlib
from base64 import b64decode
from collections import namedtuple
from typing import List, Optional, Tuple

from .attributes import to_int
from .errors import (
    MalformedDocumentError,
    UnsupportedCompressionError,
    UnsupportedEncodingError,
)
from .objects import TileFlags

__all__ = (
    "FLAG_SHIFT",
    "GID_MASK",
    "GID_TRANS_FLIPX",
    "GID_TRANS_FLIPY",
    "GID_TRANS_ROT",
    "TileData",
    "decode_flags",
    "decode_gid",
    "decode_tile_data",
    "encode_gid",
    "unpack_gids",
)

logger = logging.getLogger(__name__)

# Tiled gid flags
GID_TRANS_FLIPX = 1 << 31
GID_TRANS_FLIPY = 1 << 30
GID_TRANS_ROT = 1 << 29
GID_MASK = GID_TRANS_FLIPX | GID_TRANS_FLIPY | GID_TRANS_ROT

# moves the three flag bits into the low bits of a byte
FLAG_SHIFT = 29

# flag byte values
FLIPX = GID_TRANS_FLIPX >> FLAG_SHIFT
FLIPY = GID_TRANS_FLIPY >> FLAG_SHIFT
ROT = GID_TRANS_ROT >> FLAG_SHIFT

MAX_RAW_GID = 0xFFFFFFFF

TileData = namedtuple("TileData", ["gids", "flags"])

# all 8 combinations, indexed by flag byte
_flags_table = tuple(
    TileFlags(bool(i & FLIPX), bool(i & FLIPY), bool(i & ROT)) for i in range(8)
)


def decode_gid(raw_gid: int) -> Tuple[int, int]:
    """Decode a GID from TMX data.

    Args:
        raw_gid (int): GID, as reported by Tiled.

    Returns:
        Tuple[int, int]: the GID with the flip bits cleared, and the flip
            bits moved into the low 3 bits of a byte.

    """
    return raw_gid & ~GID_MASK, (raw_gid & GID_MASK) >> FLAG_SHIFT


def encode_gid(gid: int, flags: int = 0) -> int:
    """Pack a GID and flag byte back into the 32-bit value Tiled stores"""
    return (gid & ~GID_MASK) | ((flags & 0b111) << FLAG_SHIFT)


def decode_flags(flags: int) -> TileFlags:
    """Return TileFlags for a flag byte"""
    return _flags_table[flags & 0b111]


def _check_compression(compression: Optional[str]) -> None:
    if compression in (None, "zlib", "gzip"):
        return
    if compression == "zstd":
        msg = "layer compression zstd is not supported."
    else:
        msg = "layer compression {} is not a known format.".format(compression)
    logger.error(msg)
    raise UnsupportedCompressionError(msg)


def _decompress(data: bytes, compression: Optional[str]) -> bytes:
    if compression == "zlib":
        # skip the 2 byte zlib header and inflate the raw deflate stream;
        # the adler32 footer ends up in unused_data
        inflater = zlib.decompressobj(-zlib.MAX_WBITS)
        data = inflater.decompress(data[2:]) + inflater.flush()
        if not inflater.eof:
            raise zlib.error("incomplete or truncated stream")
        return data
    if compression == "gzip":
        return gzip.decompress(data)
    return data


def unpack_gids(
    text: str,
    encoding: Optional[str] = None,
    compression: Optional[str] = None,
) -> List[int]:
    """Return all raw 32-bit values from encoded/compressed layer data

    Args:
        text (str): Layer data in text format.
        encoding (Optional[str]): Encoding used, "csv" or "base64".
        compression (Optional[str]): Compression used with base64.

    Returns:
        List[int]: List of all the raw GIDs in the layer, flags included.

    Raises:
        UnsupportedEncodingError: if `encoding` is not csv or base64.
        UnsupportedCompressionError: for zstd and for unknown compressions.
        MalformedDocumentError: if the payload cannot be decoded.

    """
    if encoding == "base64":
        _check_compression(compression)
        try:
            data = b64decode("".join(text.split()), validate=True)
            data = _decompress(data, compression)
        except (binascii.Error, zlib.error, OSError, EOFError) as e:
            msg = "cannot decode {0} layer data: {1}".format(
                compression or "uncompressed", e
            )
            logger.error(msg)
            raise MalformedDocumentError(msg) from e
        remainder = len(data) % 4
        if remainder:
            logger.warning(
                "layer data has %d trailing bytes which are not a full tile", remainder
            )
            data = data[: len(data) - remainder]
        return [i[0] for i in struct.iter_unpack("<L", data)]

    elif encoding == "csv":
        if compression is not None:
            logger.warning("compression %s is ignored for csv data", compression)
        if not text.strip():
            return list()
        gids = list()
        for token in text.split(","):
            try:
                value = to_int(token)
            except ValueError as e:
                msg = "invalid csv layer data: {}".format(e)
                logger.error(msg)
                raise MalformedDocumentError(msg) from e
            if not 0 <= value <= MAX_RAW_GID:
                msg = "csv layer value {} does not fit in 32 bits".format(value)
                logger.error(msg)
                raise MalformedDocumentError(msg)
            gids.append(value)
        return gids

    msg = "layer encoding {} is not supported.".format(encoding)
    logger.error(msg)
    raise UnsupportedEncodingError(msg)


def decode_tile_data(
    text: str,
    encoding: Optional[str] = None,
    compression: Optional[str] = None,
) -> TileData:
    """Decode layer or chunk data into GIDs and flip flags

    Returns:
        TileData: ``gids`` is a tuple of GIDs with the flip bits cleared,
            ``flags`` is bytes of the same length with the flip bits in the
            low 3 bits of each byte.

    """
    raw = unpack_gids(text, encoding, compression)
    gids = tuple(i & ~GID_MASK for i in raw)
    flags = bytes((i & GID_MASK) >> FLAG_SHIFT for i in raw)
    return TileData(gids, flags)
