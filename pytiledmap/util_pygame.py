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
import logging
import os
from typing import Dict

from .lookup import image_rect
from .objects import SourceRect, TileFlags, Tileset

logger = logging.getLogger(__name__)

try:
    from pygame.transform import flip, rotate
    import pygame
except ImportError:
    logger.error("cannot import pygame (is it installed?)")
    raise

__all__ = [
    "handle_transformation",
    "load_tileset_images",
    "slice_tileset",
    "to_rect",
]


def handle_transformation(
    tile: pygame.Surface,
    flags: TileFlags,
) -> pygame.Surface:
    """
    Transform tile according to the flags and return a new one

    Parameters:
        tile: tile surface to transform
        flags: TileFlags object

    Returns:
        new tile surface

    """
    if flags.flipped_diagonally:
        tile = flip(rotate(tile, 270), True, False)
    if flags.flipped_horizontally or flags.flipped_vertically:
        tile = flip(tile, flags.flipped_horizontally, flags.flipped_vertically)
    return tile


def to_rect(rect: SourceRect) -> pygame.Rect:
    return pygame.Rect(rect.x, rect.y, rect.width, rect.height)


def slice_tileset(tileset: Tileset, image: pygame.Surface) -> Dict[int, pygame.Surface]:
    """
    Cut a tileset image into tiles

    Parameters:
        tileset: tileset describing the layout of the image
        image: the tileset image

    Returns:
        dict of local tile id to subsurface

    """
    tiles = dict()
    for tile_id in range(tileset.tilecount):
        rect = image_rect(tileset, tile_id)
        if rect is None:
            continue
        try:
            tiles[tile_id] = image.subsurface(to_rect(rect))
        except ValueError:
            logger.error("Tile bounds outside bounds of tileset image")
            raise
    return tiles


def load_tileset_images(tileset: Tileset, base_dir: str) -> Dict[int, pygame.Surface]:
    """
    Load the images of a tileset with pygame

    Image collection tilesets load one file per tile.  Paths are relative to
    `base_dir`, which should be the directory of the map or tileset file.

    Returns:
        dict of local tile id to surface

    """
    if tileset.image is None:
        return {
            tile.id: pygame.image.load(os.path.join(base_dir, tile.image.source))
            for tile in tileset.tiles
            if tile.image is not None
        }

    image = pygame.image.load(os.path.join(base_dir, tileset.image.source))
    if tileset.image.trans is not None:
        trans = tileset.image.trans
        image.set_colorkey(pygame.Color(trans.r, trans.g, trans.b), pygame.RLEACCEL)
    return slice_tileset(tileset, image)
