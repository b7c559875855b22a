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

from typing import Optional, Sequence

from .objects import SourceRect, TileDefinition, Tileset, TilesetReference

__all__ = (
    "get_tile_definition",
    "gid_source_rect",
    "image_rect",
    "resolve_tileset",
    "source_rect",
)


def resolve_tileset(
    references: Sequence[TilesetReference], gid: int
) -> Optional[TilesetReference]:
    """Return the tileset reference that owns the GID

    `references` must be sorted by firstgid, as they are in a TiledMap.  The
    last reference owns every GID from its firstgid up, since tilesets do not
    declare where their range ends in the map.

    Returns:
        The owning reference, or None for GID 0, GIDs below the first range
        and empty sequences.

    """
    if gid <= 0:
        return None
    found = None
    for reference in references:
        if reference.firstgid > gid:
            break
        found = reference
    return found


def _in_grid(tileset: Tileset, local_index: int) -> bool:
    return 0 <= local_index < tileset.tilecount and tileset.columns > 0


def source_rect(tileset: Tileset, local_index: int) -> Optional[SourceRect]:
    """Return the cell of a tile in the tileset grid

    Tiles are laid out row by row, `columns` per row, so the cell is at
    (col * tilewidth, row * tileheight).  Margin and spacing are not applied;
    see ``image_rect`` for the pixel region within the image.

    Returns:
        SourceRect, or None if the index is outside of the tileset or the
        tileset has no columns.

    """
    if not _in_grid(tileset, local_index):
        return None
    row, col = divmod(local_index, tileset.columns)
    return SourceRect(
        col * tileset.tilewidth,
        row * tileset.tileheight,
        tileset.tilewidth,
        tileset.tileheight,
    )


def image_rect(tileset: Tileset, local_index: int) -> Optional[SourceRect]:
    """Return the pixel region of a tile within the tileset image

    Same as ``source_rect``, but the grid starts at `margin` and has
    `spacing` pixels between tiles, as Tiled lays out the image.

    """
    if not _in_grid(tileset, local_index):
        return None
    row, col = divmod(local_index, tileset.columns)
    return SourceRect(
        tileset.margin + col * (tileset.tilewidth + tileset.spacing),
        tileset.margin + row * (tileset.tileheight + tileset.spacing),
        tileset.tilewidth,
        tileset.tileheight,
    )


def gid_source_rect(
    reference: TilesetReference, tileset: Tileset, gid: int
) -> Optional[SourceRect]:
    """Return the source rect for a GID, given the tileset which owns it"""
    if gid < reference.firstgid:
        return None
    return source_rect(tileset, gid - reference.firstgid)


def get_tile_definition(
    reference: TilesetReference, tileset: Tileset, gid: int
) -> Optional[TileDefinition]:
    """Return the extra data of a tile, or None if the tile has none"""
    if gid < reference.firstgid:
        return None
    return tileset.get_tile(gid - reference.firstgid)
