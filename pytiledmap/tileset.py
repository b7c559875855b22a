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
from types import MappingProxyType
from typing import Optional
from xml.etree import ElementTree

from .attributes import (
    getter,
    parse_int_list,
    parse_properties,
    require,
    to_color,
    to_float,
    to_int,
)
from .errors import (
    MalformedDocumentError,
    UnknownElementKindError,
    UnsupportedFormatError,
)
from .layers import parse_image, parse_object
from .objects import (
    AnimationFrame,
    TerrainColor,
    TerrainSet,
    TerrainTile,
    TerrainType,
    TileDefinition,
    Tileset,
    Vector,
)

__all__ = (
    "parse_terrain_set",
    "parse_tile",
    "parse_tileset_node",
)

logger = logging.getLogger(__name__)


def _parse_legacy_terrain(text: str):
    # "0,,1,2": an empty corner has no terrain
    return parse_int_list(text, empty=-1)


def parse_tile(node: ElementTree.Element) -> TileDefinition:
    """Parse a <tile> of a tileset.

    Tiled 1.9 renamed the "type" attribute to "class"; both are read.

    """
    get = getter(node)
    image_node = node.find("image")
    return TileDefinition(
        id=require(node, "id", to_int),
        class_=get("class", default=get("type")),
        probability=get("probability", to_float, 1.0),
        terrain=get("terrain", _parse_legacy_terrain),
        image=None if image_node is None else parse_image(image_node),
        animation=tuple(
            AnimationFrame(require(i, "tileid", to_int), require(i, "duration", to_int))
            for i in node.findall("animation/frame")
        ),
        objects=tuple(parse_object(i) for i in node.findall("objectgroup/object")),
        properties=parse_properties(node),
    )


def _parse_terrain_color(node: ElementTree.Element) -> TerrainColor:
    get = getter(node)
    return TerrainColor(
        name=require(node, "name"),
        color=require(node, "color", to_color),
        tile=get("tile", to_int, -1),
        probability=get("probability", to_float, 1.0),
        class_=get("class"),
        properties=parse_properties(node),
    )


def parse_terrain_set(node: ElementTree.Element) -> TerrainSet:
    """Parse a <wangset>

    Each <wangtile> has a wangid of 8 values, clockwise from the top edge:
    top, top-right, right, bottom-right, bottom, bottom-left, left, top-left.

    Raises:
        UnknownElementKindError: if the wangset type is not corner, edge or mixed.
        MalformedDocumentError: if a wangid does not have 8 values.

    """
    get = getter(node)
    name = require(node, "name")
    type_name = require(node, "type")
    try:
        terrain_type = TerrainType(type_name)
    except ValueError:
        msg = 'Unknown terrain type "{0}" in wangset "{1}"'.format(type_name, name)
        logger.error(msg)
        raise UnknownElementKindError(msg, type_name) from None

    tiles = dict()
    for child in node.findall("wangtile"):
        tile_id = require(child, "tileid", to_int)
        wangid = require(child, "wangid", parse_int_list)
        if len(wangid) != len(TerrainTile._fields):
            msg = 'wangtile {0} in wangset "{1}" has {2} wangid values, expected {3}'.format(
                tile_id, name, len(wangid), len(TerrainTile._fields)
            )
            logger.error(msg)
            raise MalformedDocumentError(msg)
        if tile_id in tiles:
            logger.warning('wangset "%s" redefines tile %d', name, tile_id)
        tiles[tile_id] = TerrainTile(*wangid)

    return TerrainSet(
        name=name,
        type=terrain_type,
        tile=get("tile", to_int, -1),
        class_=get("class"),
        colors=tuple(_parse_terrain_color(i) for i in node.findall("wangcolor")),
        tiles=MappingProxyType(tiles),
        properties=parse_properties(node),
    )


def parse_tileset_node(
    node: ElementTree.Element, source: Optional[str] = None
) -> Tileset:
    """Parse a <tileset> element into a Tileset

    The element may be a whole TSX document or a tileset embedded in a map.
    A "firstgid" attribute, if present, is ignored here; it belongs to the
    map's TilesetReference.

    Args:
        node: the <tileset> element.
        source: file the element was read from, used in log messages.

    """
    if node.tag != "tileset":
        msg = "Expected a <tileset> element, got <{0}>".format(node.tag)
        logger.error(msg)
        raise UnsupportedFormatError(msg)

    get = getter(node)
    name = get("name")
    logger.debug("parsing tileset %s from %s", name, source or "<embedded>")

    offset_node = node.find("tileoffset")
    if offset_node is None:
        offset = Vector(0, 0)
    else:
        offset = Vector(
            require(offset_node, "x", to_int), require(offset_node, "y", to_int)
        )

    image_node = node.find("image")
    return Tileset(
        tilewidth=require(node, "tilewidth", to_int),
        tileheight=require(node, "tileheight", to_int),
        tilecount=require(node, "tilecount", to_int),
        columns=require(node, "columns", to_int),
        name=name,
        class_=get("class"),
        version=get("version"),
        tiledversion=get("tiledversion"),
        margin=get("margin", to_int, 0),
        spacing=get("spacing", to_int, 0),
        image=None if image_node is None else parse_image(image_node),
        offset=offset,
        tiles=tuple(parse_tile(i) for i in node.findall("tile")),
        properties=parse_properties(node),
        terrain_sets=tuple(
            parse_terrain_set(i) for i in node.findall("wangsets/wangset")
        ),
    )
