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

from collections import namedtuple
from dataclasses import dataclass, field
from enum import Enum
from itertools import chain
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

__all__ = (
    "AnimationFrame",
    "Chunk",
    "Color",
    "EllipseObject",
    "Group",
    "Image",
    "ImageLayer",
    "Layer",
    "ObjectLayer",
    "Point",
    "PointObject",
    "PolygonObject",
    "PolylineObject",
    "Property",
    "PropertyType",
    "RectangleObject",
    "Size",
    "SourceRect",
    "TerrainColor",
    "TerrainSet",
    "TerrainTile",
    "TerrainType",
    "TextObject",
    "TileDefinition",
    "TileFlags",
    "TileLayer",
    "TileObject",
    "TiledMap",
    "TiledObject",
    "Tileset",
    "TilesetReference",
    "Vector",
)

flag_names = ("flipped_horizontally", "flipped_vertically", "flipped_diagonally")

Color = namedtuple("Color", ["r", "g", "b", "a"], defaults=(255,))
Vector = namedtuple("Vector", ["x", "y"])
Size = namedtuple("Size", ["width", "height"])
Point = namedtuple("Point", ["x", "y"])
SourceRect = namedtuple("SourceRect", ["x", "y", "width", "height"])
TileFlags = namedtuple("TileFlags", flag_names)
AnimationFrame = namedtuple("AnimationFrame", ["tile_id", "duration"])
TerrainTile = namedtuple(
    "TerrainTile",
    [
        "top",
        "top_right",
        "right",
        "bottom_right",
        "bottom",
        "bottom_left",
        "left",
        "top_left",
    ],
)


def _empty_mapping() -> Mapping:
    return MappingProxyType(dict())


class PropertyType(Enum):
    STRING = "string"
    BOOL = "bool"
    COLOR = "color"
    FILE = "file"
    FLOAT = "float"
    INT = "int"
    OBJECT = "object"
    CLASS = "class"


class TerrainType(Enum):
    CORNER = "corner"
    EDGE = "edge"
    MIXED = "mixed"


@dataclass(frozen=True)
class Property:
    """A custom property, kept as text.

    Call ``convert`` to get the value as a python type.  Class properties
    keep their members in ``members``.

    """

    name: str
    type: PropertyType = PropertyType.STRING
    value: Optional[str] = None
    property_type: Optional[str] = None
    members: Mapping[str, Property] = field(default_factory=_empty_mapping)

    def convert(self) -> Any:
        from .attributes import convert_property

        return convert_property(self)


@dataclass(frozen=True)
class Image:
    source: str
    width: int = 0
    height: int = 0
    trans: Optional[Color] = None


# objects


@dataclass(frozen=True)
class TiledObject:
    """Common fields of every object.  Use the subclasses to tell shapes apart."""

    id: int = 0
    name: Optional[str] = None
    class_: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    width: float = 0.0
    height: float = 0.0
    visible: bool = True
    properties: Mapping[str, Property] = field(default_factory=_empty_mapping)

    @property
    def as_points(self) -> Tuple[Point, ...]:
        return (
            Point(self.x, self.y),
            Point(self.x, self.y + self.height),
            Point(self.x + self.width, self.y + self.height),
            Point(self.x + self.width, self.y),
        )


@dataclass(frozen=True)
class PointObject(TiledObject):
    pass


@dataclass(frozen=True)
class EllipseObject(TiledObject):
    pass


@dataclass(frozen=True)
class RectangleObject(TiledObject):
    pass


@dataclass(frozen=True)
class PolygonObject(TiledObject):
    points: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class PolylineObject(TiledObject):
    points: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class TileObject(TiledObject):
    """Object linked to a tile; `flags` uses the same layout as layer data."""

    gid: int = 0
    flags: int = 0

    @property
    def tile_flags(self) -> TileFlags:
        from .codec import decode_flags

        return decode_flags(self.flags)


@dataclass(frozen=True)
class TextObject(TiledObject):
    text: str = ""
    fontfamily: str = "sans-serif"
    pixelsize: int = 16
    wrap: bool = False
    color: Color = Color(0, 0, 0)
    bold: bool = False
    italic: bool = False
    halign: str = "left"
    valign: str = "top"


# tilesets


@dataclass(frozen=True)
class TileDefinition:
    id: int
    class_: Optional[str] = None
    probability: float = 1.0
    terrain: Optional[Tuple[int, ...]] = None
    image: Optional[Image] = None
    animation: Tuple[AnimationFrame, ...] = ()
    objects: Tuple[TiledObject, ...] = ()
    properties: Mapping[str, Property] = field(default_factory=_empty_mapping)


@dataclass(frozen=True)
class TerrainColor:
    name: str
    color: Color
    tile: int = -1
    probability: float = 1.0
    class_: Optional[str] = None
    properties: Mapping[str, Property] = field(default_factory=_empty_mapping)


@dataclass(frozen=True)
class TerrainSet:
    """A wang set: terrain colors and the 8-direction code of each tile."""

    name: str
    type: TerrainType
    tile: int = -1
    class_: Optional[str] = None
    colors: Tuple[TerrainColor, ...] = ()
    tiles: Mapping[int, TerrainTile] = field(default_factory=_empty_mapping)
    properties: Mapping[str, Property] = field(default_factory=_empty_mapping)


@dataclass(frozen=True)
class Tileset:
    """Represents a Tiled Tileset

    Only tiles that carry extra data are present in `tiles`.  The first GID
    is not part of the tileset; it belongs to the map's TilesetReference.

    """

    tilewidth: int
    tileheight: int
    tilecount: int
    columns: int
    name: Optional[str] = None
    class_: Optional[str] = None
    version: Optional[str] = None
    tiledversion: Optional[str] = None
    margin: int = 0
    spacing: int = 0
    image: Optional[Image] = None
    offset: Vector = Vector(0, 0)
    tiles: Tuple[TileDefinition, ...] = ()
    properties: Mapping[str, Property] = field(default_factory=_empty_mapping)
    terrain_sets: Tuple[TerrainSet, ...] = ()

    def get_tile(self, tile_id: int) -> Optional[TileDefinition]:
        """Return the tile definition for a local tile id, or None."""
        for tile in self.tiles:
            if tile.id == tile_id:
                return tile
        return None


@dataclass(frozen=True)
class TilesetReference:
    """Where a map's GID range starts, and which file (if any) holds it"""

    firstgid: int
    source: Optional[str] = None

    @property
    def embedded(self) -> bool:
        return self.source is None


# layers


@dataclass(frozen=True)
class Layer:
    """Common fields of tile, object and image layers, and of groups."""

    id: int = 0
    name: str = ""
    class_: Optional[str] = None
    visible: bool = True
    locked: bool = False
    offset: Vector = Vector(0.0, 0.0)
    parallax: Vector = Vector(1.0, 1.0)
    opacity: float = 1.0
    tint_color: Optional[Color] = None
    width: int = 0
    height: int = 0
    properties: Mapping[str, Property] = field(default_factory=_empty_mapping)


@dataclass(frozen=True)
class Chunk:
    x: int
    y: int
    width: int
    height: int
    gids: Tuple[int, ...]
    flags: bytes


@dataclass(frozen=True)
class TileLayer(Layer):
    """Represents a TileLayer.

    Finite maps fill `gids` and `flags`, one entry per tile in row-major
    order.  Infinite maps fill `chunks` instead.

    """

    gids: Optional[Tuple[int, ...]] = None
    flags: Optional[bytes] = None
    chunks: Optional[Tuple[Chunk, ...]] = None

    def __iter__(self):
        return self.iter_data()

    def iter_data(self) -> Iterator[Tuple[int, int, int]]:
        """Yields X, Y, GID tuples for each tile in the layer."""
        if self.chunks is not None:
            for chunk in self.chunks:
                for i, gid in enumerate(chunk.gids):
                    yield chunk.x + i % chunk.width, chunk.y + i // chunk.width, gid
        elif self.gids is not None:
            for i, gid in enumerate(self.gids):
                yield i % self.width, i // self.width, gid

    def tiles(self) -> Iterator[Tuple[int, int, int, TileFlags]]:
        """Yields X, Y, GID, TileFlags for each non-empty tile."""
        from .codec import decode_flags

        for x, y, gid in self.iter_data():
            if gid:
                yield x, y, gid, decode_flags(self._flag_at(x, y))

    def _index(self, x: int, y: int) -> Tuple[Union[TileLayer, Chunk], int]:
        if self.chunks is not None:
            for chunk in self.chunks:
                if (
                    chunk.x <= x < chunk.x + chunk.width
                    and chunk.y <= y < chunk.y + chunk.height
                ):
                    return chunk, (y - chunk.y) * chunk.width + (x - chunk.x)
        elif 0 <= x < self.width and 0 <= y < self.height:
            return self, y * self.width + x
        raise ValueError(
            'Tile coordinates ({0},{1}) in layer "{2}" are invalid'.format(
                x, y, self.name
            )
        )

    def _flag_at(self, x: int, y: int) -> int:
        owner, index = self._index(x, y)
        return owner.flags[index]

    def tile_at(self, x: int, y: int) -> int:
        """Return the GID at this location, flags cleared.

        Raises:
            ValueError: if the coordinates are outside of the layer data.

        """
        owner, index = self._index(x, y)
        return owner.gids[index]

    def flags_at(self, x: int, y: int) -> TileFlags:
        """Return the flip state of the tile at this location."""
        from .codec import decode_flags

        return decode_flags(self._flag_at(x, y))


@dataclass(frozen=True)
class ObjectLayer(Layer):
    color: Optional[Color] = None
    draworder: str = "topdown"
    objects: Tuple[TiledObject, ...] = ()

    def __iter__(self):
        return iter(self.objects)


@dataclass(frozen=True)
class ImageLayer(Layer):
    image: Optional[Image] = None
    repeatx: bool = False
    repeaty: bool = False


@dataclass(frozen=True)
class Group(Layer):
    layers: Tuple[Layer, ...] = ()

    def __iter__(self):
        return iter(self.layers)

    def iter_layers(self) -> Iterator[Layer]:
        """Depth-first iterator of every nested layer and group"""
        for layer in self.layers:
            yield layer
            if isinstance(layer, Group):
                yield from layer.iter_layers()


# map


@dataclass(frozen=True)
class TiledMap:
    """Contains the layers, objects and tileset references of a Tiled map.

    `layers` holds the top level layers and groups in document order.
    Embedded tilesets are indexed by their first GID; external ones are only
    referenced, and can be loaded with ``load_external_tilesets``.

    """

    width: int
    height: int
    tilewidth: int
    tileheight: int
    version: Optional[str] = None
    tiledversion: Optional[str] = None
    class_: Optional[str] = None
    orientation: str = "orthogonal"
    renderorder: str = "right-down"
    hexsidelength: Optional[int] = None
    staggeraxis: Optional[str] = None
    staggerindex: Optional[str] = None
    parallax_origin: Vector = Vector(0.0, 0.0)
    infinite: bool = False
    background_color: Optional[Color] = None
    nextlayerid: Optional[int] = None
    nextobjectid: Optional[int] = None
    tilesets: Tuple[TilesetReference, ...] = ()
    embedded_tilesets: Mapping[int, Tileset] = field(default_factory=_empty_mapping)
    layers: Tuple[Layer, ...] = ()
    properties: Mapping[str, Property] = field(default_factory=_empty_mapping)
    filename: Optional[str] = None

    def __iter__(self):
        return iter(self.layers)

    def iter_layers(self) -> Iterator[Layer]:
        """Depth-first iterator of every layer and group in the map"""
        for layer in self.layers:
            yield layer
            if isinstance(layer, Group):
                yield from layer.iter_layers()

    @property
    def groups(self) -> Iterator[Group]:
        return (l for l in self.iter_layers() if isinstance(l, Group))

    @property
    def tile_layers(self) -> Iterator[TileLayer]:
        return (l for l in self.iter_layers() if isinstance(l, TileLayer))

    @property
    def object_layers(self) -> Iterator[ObjectLayer]:
        return (l for l in self.iter_layers() if isinstance(l, ObjectLayer))

    @property
    def image_layers(self) -> Iterator[ImageLayer]:
        return (l for l in self.iter_layers() if isinstance(l, ImageLayer))

    @property
    def visible_layers(self) -> Iterator[Layer]:
        """Returns iterator of Layer objects that are set "visible"."""
        return (l for l in self.iter_layers() if l.visible)

    @property
    def objects(self) -> Iterator[TiledObject]:
        """Returns iterator of all the objects associated with the map."""
        return chain(*self.object_layers)

    def get_layer_by_name(self, name: str) -> Layer:
        """Return a layer by name.  Case-sensitive; nested layers included.

        Raises:
            ValueError: if layer by name does not exist

        """
        for layer in self.iter_layers():
            if layer.name == name:
                return layer
        raise ValueError('Layer "{0}" not found.'.format(name))

    def get_object_by_id(self, obj_id: int) -> TiledObject:
        for obj in self.objects:
            if obj.id == obj_id:
                return obj
        raise ValueError("Object {0} not found.".format(obj_id))

    def get_tileset_reference(self, gid: int) -> Optional[TilesetReference]:
        """Return the tileset reference that owns the gid, or None"""
        from .lookup import resolve_tileset

        return resolve_tileset(self.tilesets, gid)

    def get_tileset(
        self,
        reference: TilesetReference,
        external: Optional[Dict[int, Tileset]] = None,
    ) -> Optional[Tileset]:
        """Return the Tileset for a reference

        Embedded tilesets come from the map itself; external ones are looked
        up in `external`, as returned by ``load_external_tilesets``.

        """
        if reference.embedded:
            return self.embedded_tilesets.get(reference.firstgid)
        if external is None:
            return None
        return external.get(reference.firstgid)
