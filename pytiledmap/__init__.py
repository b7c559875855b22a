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

from .errors import *
from .objects import *
from .codec import *
from .lookup import *
from .pytiledmap import *

logger = logging.getLogger(__name__)

try:
    from pytiledmap.util_pygame import load_tileset_images
except ImportError:
    logger.debug("cannot import pygame tools")

__version__ = (1, 0)
__author__ = "bitcraft"
__author_email__ = "leif.theden@gmail.com"
__description__ = "Decoder for Tiled TMX maps and TSX tilesets - Python 3.7 +"
