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
from typing import Any, Dict, Tuple
from xml.etree import ElementTree

from .attributes import (
    getter,
    parse_points,
    parse_properties,
    require,
    to_bool,
    to_color,
    to_float,
    to_int,
)
from .codec import MAX_RAW_GID, decode_gid, decode_tile_data
from .errors import (
    MalformedDocumentError,
    UnknownElementKindError,
    UnsupportedEncodingError,
)
from .objects import (
    Chunk,
    Color,
    EllipseObject,
    Group,
    Image,
    ImageLayer,
    Layer,
    ObjectLayer,
    PointObject,
    PolygonObject,
    PolylineObject,
    RectangleObject,
    TextObject,
    TileLayer,
    TileObject,
    TiledObject,
    Vector,
)

__all__ = (
    "parse_group",
    "parse_image",
    "parse_image_layer",
    "parse_layers",
    "parse_object",
    "parse_object_layer",
    "parse_tile_layer",
)

logger = logging.getLogger(__name__)

# children of <map> and <group> which are not layers
structural_tags = frozenset(("properties", "tileset", "editorsettings"))


def parse_image(node: ElementTree.Element) -> Image:
    get = getter(node)
    return Image(
        source=require(node, "source"),
        width=get("width", to_int, 0),
        height=get("height", to_int, 0),
        trans=get("trans", to_color),
    )


def _layer_attributes(node: ElementTree.Element) -> Dict[str, Any]:
    """Return the attributes shared by every kind of layer"""
    get = getter(node)
    return dict(
        id=get("id", to_int, 0),
        name=get("name", default=""),
        class_=get("class"),
        visible=get("visible", to_bool, True),
        locked=get("locked", to_bool, False),
        offset=Vector(get("offsetx", to_float, 0.0), get("offsety", to_float, 0.0)),
        parallax=Vector(
            get("parallaxx", to_float, 1.0), get("parallaxy", to_float, 1.0)
        ),
        opacity=get("opacity", to_float, 1.0),
        tint_color=get("tintcolor", to_color),
        width=get("width", to_int, 0),
        height=get("height", to_int, 0),
        properties=parse_properties(node),
    )


# objects


def parse_object(node: ElementTree.Element) -> TiledObject:
    """Parse an <object>, choosing the class from its shape

    A point, ellipse, polygon, polyline or text child decides the shape.
    Without one, objects with a gid are tile objects and the rest are
    rectangles.

    """
    get = getter(node)
    common = dict(
        id=require(node, "id", to_int),
        name=get("name"),
        class_=get("class", default=get("type")),
        x=get("x", to_float, 0.0),
        y=get("y", to_float, 0.0),
        rotation=get("rotation", to_float, 0.0),
        width=get("width", to_float, 0.0),
        height=get("height", to_float, 0.0),
        visible=get("visible", to_bool, True),
        properties=parse_properties(node),
    )

    if node.find("point") is not None:
        return PointObject(**common)

    if node.find("ellipse") is not None:
        return EllipseObject(**common)

    polygon = node.find("polygon")
    if polygon is not None:
        return PolygonObject(points=require(polygon, "points", parse_points), **common)

    polyline = node.find("polyline")
    if polyline is not None:
        return PolylineObject(points=require(polyline, "points", parse_points), **common)

    text = node.find("text")
    if text is not None:
        return _parse_text(text, common)

    raw_gid = get("gid", to_int)
    if raw_gid is not None:
        if not 0 <= raw_gid <= MAX_RAW_GID:
            msg = "object {0} gid {1} does not fit in 32 bits".format(common["id"], raw_gid)
            logger.error(msg)
            raise MalformedDocumentError(msg)
        gid, flags = decode_gid(raw_gid)
        return TileObject(gid=gid, flags=flags, **common)

    return RectangleObject(**common)


def _parse_text(node: ElementTree.Element, common: Dict[str, Any]) -> TextObject:
    get = getter(node)
    return TextObject(
        text=node.text or "",
        fontfamily=get("fontfamily", default="sans-serif"),
        pixelsize=get("pixelsize", to_int, 16),
        wrap=get("wrap", to_bool, False),
        color=get("color", to_color, Color(0, 0, 0)),
        bold=get("bold", to_bool, False),
        italic=get("italic", to_bool, False),
        halign=get("halign", default="left"),
        valign=get("valign", default="top"),
        **common,
    )


# layers


def _check_tile_count(name: str, count: int, width: int, height: int):
    if width <= 0 or height <= 0:
        msg = '{0} has invalid size {1}x{2}'.format(name, width, height)
        logger.error(msg)
        raise MalformedDocumentError(msg)
    if count != width * height:
        msg = '{0} has {1} tiles, expected {2}'.format(name, count, width * height)
        logger.error(msg)
        raise MalformedDocumentError(msg)


def _parse_chunk(
    node: ElementTree.Element, layer_name: str, encoding, compression
) -> Chunk:
    x = require(node, "x", to_int)
    y = require(node, "y", to_int)
    width = require(node, "width", to_int)
    height = require(node, "height", to_int)
    data = decode_tile_data(node.text or "", encoding, compression)
    name = 'Chunk ({0}, {1}) of layer "{2}"'.format(x, y, layer_name)
    _check_tile_count(name, len(data.gids), width, height)
    return Chunk(x=x, y=y, width=width, height=height, gids=data.gids, flags=data.flags)


def parse_tile_layer(node: ElementTree.Element, infinite: bool) -> TileLayer:
    """Parse a <layer>; infinite maps store their tiles in chunks"""
    attributes = _layer_attributes(node)
    data_node = node.find("data")
    if data_node is None:
        msg = 'Layer "{0}" has no data element'.format(attributes["name"])
        logger.error(msg)
        raise MalformedDocumentError(msg)

    encoding = data_node.get("encoding")
    compression = data_node.get("compression")
    if encoding is None and data_node.find("tile") is not None:
        msg = "XML tile elements are no longer supported. Must use base64 or csv map formats."
        logger.error(msg)
        raise UnsupportedEncodingError(msg)

    name = attributes["name"]
    chunk_nodes = data_node.findall("chunk")
    if infinite:
        if not chunk_nodes and (data_node.text or "").strip():
            msg = 'Layer "{0}" has flat tile data, but the map is infinite'.format(name)
            logger.error(msg)
            raise MalformedDocumentError(msg)
        chunks = tuple(
            _parse_chunk(i, name, encoding, compression) for i in chunk_nodes
        )
        return TileLayer(chunks=chunks, **attributes)

    if chunk_nodes:
        msg = 'Layer "{0}" has chunks, but the map is not infinite'.format(name)
        logger.error(msg)
        raise MalformedDocumentError(msg)

    data = decode_tile_data(data_node.text or "", encoding, compression)
    _check_tile_count(
        'Layer "{0}"'.format(name),
        len(data.gids),
        attributes["width"],
        attributes["height"],
    )
    return TileLayer(gids=data.gids, flags=data.flags, **attributes)


def parse_object_layer(node: ElementTree.Element, infinite: bool) -> ObjectLayer:
    get = getter(node)
    return ObjectLayer(
        color=get("color", to_color),
        draworder=get("draworder", default="topdown"),
        objects=tuple(parse_object(i) for i in node.findall("object")),
        **_layer_attributes(node),
    )


def parse_image_layer(node: ElementTree.Element, infinite: bool) -> ImageLayer:
    get = getter(node)
    image_node = node.find("image")
    return ImageLayer(
        image=None if image_node is None else parse_image(image_node),
        repeatx=get("repeatx", to_bool, False),
        repeaty=get("repeaty", to_bool, False),
        **_layer_attributes(node),
    )


def parse_group(node: ElementTree.Element, infinite: bool) -> Group:
    return Group(layers=parse_layers(node, infinite), **_layer_attributes(node))


layer_parsers = {
    "group": parse_group,
    "imagelayer": parse_image_layer,
    "layer": parse_tile_layer,
    "objectgroup": parse_object_layer,
}


def parse_layers(node: ElementTree.Element, infinite: bool) -> Tuple[Layer, ...]:
    """Parse the layer and group children of a <map> or <group> node

    Layers are returned in document order, which is also drawing order.

    Raises:
        UnknownElementKindError: for children that are not layers.

    """
    layers = list()
    for child in node:
        if child.tag in structural_tags:
            continue
        try:
            parser = layer_parsers[child.tag]
        except KeyError:
            msg = "Unknown layer type: {0}".format(child.tag)
            logger.error(msg)
            raise UnknownElementKindError(msg, child.tag) from None
        layer = parser(child, infinite)
        logger.debug("parsed %s %s", type(layer).__name__, layer.name)
        layers.append(layer)
    return tuple(layers)
