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

__all__ = (
    "TiledException",
    "NotFoundError",
    "UnsupportedFormatError",
    "MalformedDocumentError",
    "MissingRequiredAttributeError",
    "UnsupportedEncodingError",
    "UnsupportedCompressionError",
    "UnknownElementKindError",
    "ExternalTilesetNotFoundError",
)


class TiledException(Exception):
    """Base class for every error raised while decoding Tiled documents."""


class NotFoundError(TiledException, FileNotFoundError):
    """The map or tileset file does not exist."""


class UnsupportedFormatError(TiledException):
    """Wrong file extension, or the root element is not a map/tileset."""


class MalformedDocumentError(TiledException):
    """The document could not be parsed.

    When raised by the orchestrator, the underlying exception is available
    as ``__cause__``.

    """


class MissingRequiredAttributeError(MalformedDocumentError):
    def __init__(self, tag: str, attribute: str) -> None:
        super().__init__(
            'Element <{0}> is missing required attribute "{1}"'.format(tag, attribute)
        )
        self.tag = tag
        self.attribute = attribute


class UnsupportedEncodingError(TiledException):
    """Tile data encoding is not csv or base64."""


class UnsupportedCompressionError(TiledException):
    """Tile data compression is unknown, or known but not supported (zstd)."""


class UnknownElementKindError(TiledException):
    def __init__(self, message: str, kind: str) -> None:
        super().__init__(message)
        self.kind = kind


class ExternalTilesetNotFoundError(NotFoundError):
    def __init__(self, path: str, source: str) -> None:
        super().__init__(
            "Cannot find tileset file {0}, should be at {1}".format(source, path)
        )
        self.path = path
        self.source = source
