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

import logging
import os
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, Optional, Union
from xml.etree import ElementTree

from .attributes import getter, parse_properties, require, to_bool, to_color, to_float, to_int
from .errors import (
    ExternalTilesetNotFoundError,
    MalformedDocumentError,
    NotFoundError,
    TiledException,
    UnsupportedFormatError,
)
from .layers import parse_layers
from .objects import Group, TiledMap, Tileset, TilesetReference, Vector
from .tileset import parse_tileset_node

__all__ = (
    "MapParser",
    "ParserState",
    "load_external_tilesets",
    "load_map",
    "load_tileset",
    "parse_map",
    "parse_tileset",
)

logger = logging.getLogger(__name__)

Document = Union[str, bytes]


class ParserState(Enum):
    UNPARSED = "unparsed"
    PARSING_ATTRIBUTES = "parsing attributes"
    PARSING_TILESETS = "parsing tilesets"
    PARSING_LAYERS = "parsing layers"
    PARSING_GROUPS = "parsing groups"
    COMPLETE = "complete"
    FAILED = "failed"


def _parse_document(text: Document, tag: str) -> ElementTree.Element:
    root = ElementTree.fromstring(text)
    if root.tag != tag:
        msg = "Expected a <{0}> document, got <{1}>".format(tag, root.tag)
        logger.error(msg)
        raise UnsupportedFormatError(msg)
    return root


class MapParser:
    """Builds a TiledMap from the text of a TMX document

    The parser moves through ParserState in order: attributes, tilesets,
    layers, then groups, where nested groups and objects are indexed and the
    map is frozen.  A parser can be used once; after ``parse`` the state is
    either COMPLETE or FAILED.

    Embedded tilesets are parsed in place.  External tilesets are only
    recorded as references; see ``load_external_tilesets``.

    """

    def __init__(self, text: Document, filename: Optional[str] = None) -> None:
        self.text = text
        self.filename = filename
        self.state = ParserState.UNPARSED

        self.attributes = dict()
        self.references = list()
        self.embedded_tilesets = dict()
        self.layers = ()

    def __repr__(self):
        return '<{0}: "{1}" {2}>'.format(
            self.__class__.__name__, self.filename, self.state.name
        )

    def _transition(self, state: ParserState) -> None:
        logger.debug(
            "%s: %s -> %s", self.filename or "<string>", self.state.name, state.name
        )
        self.state = state

    def parse(self) -> TiledMap:
        """Parse the document and return the map

        Raises:
            TiledException: the first error found; errors which are not a
                TiledException are raised as MalformedDocumentError, with the
                original error as ``__cause__``.

        """
        if self.state is not ParserState.UNPARSED:
            raise RuntimeError("{0!r} has already been used".format(self))

        try:
            self._transition(ParserState.PARSING_ATTRIBUTES)
            root = _parse_document(self.text, "map")
            self.parse_attributes(root)

            self._transition(ParserState.PARSING_TILESETS)
            self.parse_tilesets(root)

            self._transition(ParserState.PARSING_LAYERS)
            self.layers = parse_layers(root, self.attributes["infinite"])

            self._transition(ParserState.PARSING_GROUPS)
            tiled_map = self.finalize()
        except TiledException:
            self._transition(ParserState.FAILED)
            raise
        except Exception as e:
            self._transition(ParserState.FAILED)
            msg = "Cannot parse map {0}: {1}".format(self.filename or "<string>", e)
            logger.error(msg)
            raise MalformedDocumentError(msg) from e

        self._transition(ParserState.COMPLETE)
        return tiled_map

    def parse_attributes(self, node: ElementTree.Element) -> None:
        get = getter(node)
        self.attributes = dict(
            version=get("version"),
            tiledversion=get("tiledversion"),
            class_=get("class"),
            orientation=require(node, "orientation"),
            renderorder=get("renderorder", default="right-down"),
            width=require(node, "width", to_int),
            height=require(node, "height", to_int),
            tilewidth=require(node, "tilewidth", to_int),
            tileheight=require(node, "tileheight", to_int),
            hexsidelength=get("hexsidelength", to_int),
            staggeraxis=get("staggeraxis"),
            staggerindex=get("staggerindex"),
            parallax_origin=Vector(
                get("parallaxoriginx", to_float, 0.0),
                get("parallaxoriginy", to_float, 0.0),
            ),
            infinite=get("infinite", to_bool, False),
            background_color=get("backgroundcolor", to_color),
            nextlayerid=get("nextlayerid", to_int),
            nextobjectid=get("nextobjectid", to_int),
            properties=parse_properties(node),
        )

    def parse_tilesets(self, node: ElementTree.Element) -> None:
        """Record tileset references, parsing the embedded tilesets"""
        references = dict()
        for child in node.findall("tileset"):
            firstgid = require(child, "firstgid", to_int)
            if firstgid < 1:
                msg = "Tileset firstgid must be 1 or more, got {0}".format(firstgid)
                logger.error(msg)
                raise MalformedDocumentError(msg)
            if firstgid in references:
                msg = "Tileset firstgid {0} is used more than once".format(firstgid)
                logger.error(msg)
                raise MalformedDocumentError(msg)

            source = child.get("source")
            references[firstgid] = TilesetReference(firstgid, source)
            if source is None:
                self.embedded_tilesets[firstgid] = parse_tileset_node(child)
                logger.debug("registered embedded tileset at gid %d", firstgid)
            else:
                logger.debug("registered tileset %s at gid %d", source, firstgid)

        self.references = [references[i] for i in sorted(references)]

    def finalize(self) -> TiledMap:
        groups = 0
        object_ids = set()
        for layer in self._iter_layers():
            if isinstance(layer, Group):
                groups += 1
                continue
            for obj in getattr(layer, "objects", ()):
                if obj.id in object_ids:
                    logger.warning(
                        'object id %d is used more than once in layer "%s"',
                        obj.id,
                        layer.name,
                    )
                object_ids.add(obj.id)
        logger.debug("indexed %d groups and %d objects", groups, len(object_ids))

        return TiledMap(
            tilesets=tuple(self.references),
            embedded_tilesets=MappingProxyType(dict(self.embedded_tilesets)),
            layers=self.layers,
            filename=self.filename,
            **self.attributes,
        )

    def _iter_layers(self):
        stack = list(reversed(self.layers))
        while stack:
            layer = stack.pop()
            yield layer
            if isinstance(layer, Group):
                stack.extend(reversed(layer.layers))


def parse_map(text: Document, filename: Optional[str] = None) -> TiledMap:
    """Parse the text of a TMX document

    Args:
        text: the document, as str or bytes.
        filename: stored in the map, and used to find external tilesets.

    """
    return MapParser(text, filename).parse()


def parse_tileset(text: Document, source: Optional[str] = None) -> Tileset:
    """Parse a TSX document, or a <tileset> fragment of a map"""
    try:
        root = _parse_document(text, "tileset")
        return parse_tileset_node(root, source)
    except TiledException:
        raise
    except Exception as e:
        msg = "Cannot parse tileset {0}: {1}".format(source or "<string>", e)
        logger.error(msg)
        raise MalformedDocumentError(msg) from e


def _read_file(path: str) -> bytes:
    with open(path, "rb") as fp:
        return fp.read()


def _load(path: str, extension: str) -> bytes:
    if not os.path.exists(path):
        msg = "Cannot find file {0}".format(path)
        logger.error(msg)
        raise NotFoundError(msg)
    if os.path.splitext(path)[1].lower() != extension:
        msg = "Cannot load {0}, expected a {1} file".format(path, extension)
        logger.error(msg)
        raise UnsupportedFormatError(msg)
    return _read_file(path)


def load_map(path: str) -> TiledMap:
    """Load a .tmx file.  External tilesets are not loaded."""
    return parse_map(_load(path, ".tmx"), filename=path)


def load_tileset(path: str) -> Tileset:
    """Load a .tsx file"""
    return parse_tileset(_load(path, ".tsx"), source=path)


def load_external_tilesets(
    tiled_map: TiledMap,
    base_dir: Optional[str] = None,
    reader: Optional[Callable[[str], Document]] = None,
) -> Dict[int, Tileset]:
    """Load every external tileset a map references

    Tiled stores paths relative to the map, so by default they are resolved
    from the directory of ``tiled_map.filename``.

    Args:
        tiled_map: the map.
        base_dir: directory the tileset sources are relative to.
        reader: function returning the contents of a path.  It should raise
            FileNotFoundError for missing files.

    Returns:
        Dict[int, Tileset]: tilesets, keyed by firstgid.

    Raises:
        ExternalTilesetNotFoundError: if a tileset file does not exist.
        UnsupportedFormatError: if a tileset source is not a .tsx file.
        MalformedDocumentError: if a tileset file cannot be read.

    """
    if base_dir is None:
        base_dir = os.path.dirname(tiled_map.filename or "")
    if reader is None:
        reader = _read_file

    tilesets = dict()
    for reference in tiled_map.tilesets:
        if reference.embedded:
            continue
        source = reference.source
        if os.path.splitext(source)[1].lower() != ".tsx":
            msg = "Found external tileset, but cannot handle type: {0}".format(source)
            logger.error(msg)
            raise UnsupportedFormatError(msg)

        # sources are always under base_dir, even with a leading separator
        if base_dir:
            path = os.path.join(base_dir, source.lstrip("/\\"))
        else:
            path = source
        try:
            data = reader(path)
        except FileNotFoundError as e:
            error = ExternalTilesetNotFoundError(path, source)
            logger.error(str(error))
            raise error from e
        except OSError as e:
            msg = "Cannot read tileset file {0}: {1}".format(path, e)
            logger.error(msg)
            raise MalformedDocumentError(msg) from e

        tilesets[reference.firstgid] = parse_tileset(data, source=path)
        logger.debug("loaded tileset %s at gid %d", path, reference.firstgid)
    return tilesets
