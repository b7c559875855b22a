import unittest

from pytiledmap.lookup import (
    get_tile_definition,
    gid_source_rect,
    image_rect,
    resolve_tileset,
    source_rect,
)
from pytiledmap.objects import SourceRect, TileDefinition, Tileset, TilesetReference


def tileset(**kwargs):
    options = dict(tilewidth=16, tileheight=16, tilecount=64, columns=8)
    options.update(kwargs)
    return Tileset(**options)


class ResolveTilesetTest(unittest.TestCase):
    references = (
        TilesetReference(1, "a.tsx"),
        TilesetReference(2),
        TilesetReference(50, "c.tsx"),
    )

    def test_ranges(self):
        self.assertEqual(resolve_tileset(self.references, 1).firstgid, 1)
        self.assertEqual(resolve_tileset(self.references, 2).firstgid, 2)
        self.assertEqual(resolve_tileset(self.references, 49).firstgid, 2)
        self.assertEqual(resolve_tileset(self.references, 50).firstgid, 50)

    def test_last_absorbs_tail(self):
        self.assertEqual(resolve_tileset(self.references, 100000).firstgid, 50)

    def test_empty_gid(self):
        self.assertIsNone(resolve_tileset(self.references, 0))

    def test_below_first_range(self):
        references = (TilesetReference(10),)
        self.assertIsNone(resolve_tileset(references, 5))

    def test_no_tilesets(self):
        self.assertIsNone(resolve_tileset((), 1))


class SourceRectTest(unittest.TestCase):
    def test_first(self):
        self.assertEqual(source_rect(tileset(), 0), SourceRect(0, 0, 16, 16))

    def test_second_row(self):
        self.assertEqual(source_rect(tileset(), 9), SourceRect(16, 16, 16, 16))

    def test_last(self):
        self.assertEqual(source_rect(tileset(), 63), SourceRect(112, 112, 16, 16))

    def test_out_of_range(self):
        self.assertIsNone(source_rect(tileset(), 64))
        self.assertIsNone(source_rect(tileset(), -1))

    def test_no_columns(self):
        self.assertIsNone(source_rect(tileset(columns=0), 0))

    def test_margin_and_spacing_ignored(self):
        ts = tileset(margin=2, spacing=1)
        self.assertEqual(source_rect(ts, 9), SourceRect(16, 16, 16, 16))


class ImageRectTest(unittest.TestCase):
    def test_no_margin_no_spacing(self):
        ts = tileset()
        self.assertEqual(image_rect(ts, 9), source_rect(ts, 9))

    def test_out_of_range(self):
        self.assertIsNone(image_rect(tileset(), 64))
        self.assertIsNone(image_rect(tileset(columns=0), 0))

    def test_image_split_no_margin_with_spacing(self):
        ts = tileset(tilewidth=4, tileheight=8, tilecount=4, columns=2, spacing=1)
        result = [image_rect(ts, i) for i in range(4)]
        expected = [(0, 0, 4, 8), (5, 0, 4, 8), (0, 9, 4, 8), (5, 9, 4, 8)]
        self.assertEqual(expected, result)

    def test_image_split_with_margin_no_spacing(self):
        ts = tileset(tilewidth=4, tileheight=8, tilecount=4, columns=2, margin=1)
        result = [image_rect(ts, i) for i in range(4)]
        expected = [(1, 1, 4, 8), (5, 1, 4, 8), (1, 9, 4, 8), (5, 9, 4, 8)]
        self.assertEqual(expected, result)

    def test_image_split_with_margin_with_spacing(self):
        ts = tileset(tilewidth=4, tileheight=8, tilecount=4, columns=2, margin=1, spacing=1)
        result = [image_rect(ts, i) for i in range(4)]
        expected = [(1, 1, 4, 8), (6, 1, 4, 8), (1, 10, 4, 8), (6, 10, 4, 8)]
        self.assertEqual(expected, result)


class GidLookupTest(unittest.TestCase):
    def setUp(self):
        self.reference = TilesetReference(65)
        self.tileset = tileset(
            tilecount=4, columns=2, tiles=(TileDefinition(3, class_="door"),)
        )

    def test_gid_source_rect(self):
        rect = gid_source_rect(self.reference, self.tileset, 68)
        self.assertEqual(rect, SourceRect(16, 16, 16, 16))

    def test_gid_source_rect_outside(self):
        self.assertIsNone(gid_source_rect(self.reference, self.tileset, 64))
        self.assertIsNone(gid_source_rect(self.reference, self.tileset, 69))

    def test_get_tile_definition(self):
        self.assertEqual(get_tile_definition(self.reference, self.tileset, 68).class_, "door")
        self.assertIsNone(get_tile_definition(self.reference, self.tileset, 65))
        self.assertIsNone(get_tile_definition(self.reference, self.tileset, 3))


if __name__ == "__main__":
    unittest.main()
