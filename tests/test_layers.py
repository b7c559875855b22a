import unittest
from xml.etree import ElementTree

from pytiledmap.errors import (
    MalformedDocumentError,
    MissingRequiredAttributeError,
    UnknownElementKindError,
    UnsupportedCompressionError,
    UnsupportedEncodingError,
)
from pytiledmap.layers import parse_layers, parse_object, parse_tile_layer
from pytiledmap.objects import (
    Color,
    EllipseObject,
    Group,
    ImageLayer,
    ObjectLayer,
    Point,
    PointObject,
    PolygonObject,
    PolylineObject,
    RectangleObject,
    TextObject,
    TileFlags,
    TileLayer,
    TileObject,
    Vector,
)


def element(text):
    return ElementTree.fromstring(text)


class ObjectTest(unittest.TestCase):
    def test_point(self):
        obj = parse_object(element('<object id="1" x="3" y="4"><point/></object>'))
        self.assertIsInstance(obj, PointObject)
        self.assertEqual((obj.x, obj.y), (3.0, 4.0))

    def test_ellipse(self):
        obj = parse_object(element('<object id="1" width="5" height="6"><ellipse/></object>'))
        self.assertIsInstance(obj, EllipseObject)
        self.assertEqual((obj.width, obj.height), (5.0, 6.0))

    def test_polygon(self):
        obj = parse_object(
            element('<object id="1"><polygon points="0,0 4,0 4,-4"/></object>')
        )
        self.assertIsInstance(obj, PolygonObject)
        self.assertEqual(obj.points, (Point(0, 0), Point(4, 0), Point(4, -4)))

    def test_polyline(self):
        obj = parse_object(element('<object id="1"><polyline points="1,2 3,4"/></object>'))
        self.assertIsInstance(obj, PolylineObject)
        self.assertEqual(obj.points, (Point(1, 2), Point(3, 4)))

    def test_bad_points(self):
        with self.assertRaises(MalformedDocumentError):
            parse_object(element('<object id="1"><polygon points="0,0 4"/></object>'))

    def test_text(self):
        obj = parse_object(
            element('<object id="1"><text italic="1" valign="bottom">Hi</text></object>')
        )
        self.assertIsInstance(obj, TextObject)
        self.assertEqual(obj.text, "Hi")
        self.assertTrue(obj.italic)
        self.assertFalse(obj.bold)
        self.assertEqual(obj.valign, "bottom")
        self.assertEqual(obj.halign, "left")
        self.assertEqual(obj.fontfamily, "sans-serif")
        self.assertEqual(obj.pixelsize, 16)
        self.assertEqual(obj.color, Color(0, 0, 0))

    def test_tile_object(self):
        obj = parse_object(element('<object id="1" gid="3221225474"/>'))
        self.assertIsInstance(obj, TileObject)
        self.assertEqual(obj.gid, 2)
        self.assertEqual(obj.tile_flags, TileFlags(True, True, False))

    def test_rectangle(self):
        obj = parse_object(element('<object id="9" name="r" width="8" height="2"/>'))
        self.assertIsInstance(obj, RectangleObject)
        self.assertEqual(obj.name, "r")
        self.assertEqual(
            obj.as_points, (Point(0, 0), Point(0, 2), Point(8, 2), Point(8, 0))
        )

    def test_shape_wins_over_gid(self):
        obj = parse_object(element('<object id="1" gid="5"><ellipse/></object>'))
        self.assertIsInstance(obj, EllipseObject)

    def test_defaults(self):
        obj = parse_object(element('<object id="1"/>'))
        self.assertEqual((obj.x, obj.y, obj.rotation), (0.0, 0.0, 0.0))
        self.assertTrue(obj.visible)
        self.assertIsNone(obj.name)
        self.assertIsNone(obj.class_)

    def test_class_and_type(self):
        self.assertEqual(parse_object(element('<object id="1" class="a"/>')).class_, "a")
        self.assertEqual(parse_object(element('<object id="1" type="b"/>')).class_, "b")

    def test_id_required(self):
        with self.assertRaises(MissingRequiredAttributeError):
            parse_object(element("<object/>"))


class TileLayerTest(unittest.TestCase):
    def test_csv(self):
        layer = parse_tile_layer(
            element(
                '<layer id="1" name="a" width="2" height="2">'
                '<data encoding="csv">1,0,2147483651,4</data></layer>'
            ),
            False,
        )
        self.assertIsInstance(layer, TileLayer)
        self.assertEqual(layer.gids, (1, 0, 3, 4))
        self.assertEqual(layer.tile_at(0, 1), 3)
        self.assertTrue(layer.flags_at(0, 1).flipped_horizontally)
        self.assertFalse(layer.flags_at(1, 1).flipped_horizontally)
        self.assertIsNone(layer.chunks)
        self.assertEqual(list(layer), [(0, 0, 1), (1, 0, 0), (0, 1, 3), (1, 1, 4)])

    def test_tiles_skips_empty(self):
        layer = parse_tile_layer(
            element(
                '<layer id="1" width="2" height="1"><data encoding="csv">0,5</data></layer>'
            ),
            False,
        )
        self.assertEqual(list(layer.tiles()), [(1, 0, 5, TileFlags(False, False, False))])

    def test_invalid_coordinates(self):
        layer = parse_tile_layer(
            element('<layer id="1" width="1" height="1"><data encoding="csv">1</data></layer>'),
            False,
        )
        with self.assertRaises(ValueError):
            layer.tile_at(1, 0)
        with self.assertRaises(ValueError):
            layer.tile_at(0, -1)

    def test_too_few_tiles(self):
        node = element('<layer id="1" width="3" height="1"><data encoding="csv">1,2</data></layer>')
        with self.assertRaises(MalformedDocumentError):
            parse_tile_layer(node, False)

    def test_too_many_tiles(self):
        node = element(
            '<layer id="1" name="l" width="2" height="1"><data encoding="csv">1,2,3</data></layer>'
        )
        with self.assertRaises(MalformedDocumentError):
            parse_tile_layer(node, False)

    def test_missing_width(self):
        node = element('<layer id="1" name="l"><data encoding="csv">1,2</data></layer>')
        with self.assertRaises(MalformedDocumentError):
            parse_tile_layer(node, False)

    def test_chunk_size_mismatch(self):
        node = element(
            '<layer id="1"><data encoding="csv">'
            '<chunk x="0" y="0" width="2" height="2">1,2,3</chunk></data></layer>'
        )
        with self.assertRaises(MalformedDocumentError):
            parse_tile_layer(node, True)

    def test_chunk_without_size(self):
        node = element(
            '<layer id="1"><data encoding="csv">'
            '<chunk x="0" y="0" width="0" height="1"></chunk></data></layer>'
        )
        with self.assertRaises(MalformedDocumentError):
            parse_tile_layer(node, True)

    def test_flat_data_in_infinite_map(self):
        node = element(
            '<layer id="1" width="2" height="1"><data encoding="csv">1,2</data></layer>'
        )
        with self.assertRaises(MalformedDocumentError):
            parse_tile_layer(node, True)

    def test_infinite_without_chunks(self):
        node = element('<layer id="1"><data encoding="csv">\n</data></layer>')
        layer = parse_tile_layer(node, True)
        self.assertEqual(layer.chunks, ())

    def test_chunks(self):
        node = element(
            '<layer id="1" width="4" height="2"><data encoding="csv">'
            '<chunk x="-2" y="0" width="2" height="1">1,2</chunk>'
            '<chunk x="0" y="0" width="2" height="2">3,0,0,1073741828</chunk>'
            "</data></layer>"
        )
        layer = parse_tile_layer(node, True)
        self.assertIsNone(layer.gids)
        self.assertEqual(len(layer.chunks), 2)
        self.assertEqual(layer.tile_at(-1, 0), 2)
        self.assertEqual(layer.tile_at(1, 1), 4)
        self.assertTrue(layer.flags_at(1, 1).flipped_vertically)
        self.assertEqual(
            [i for i in layer if i[2]], [(-2, 0, 1), (-1, 0, 2), (0, 0, 3), (1, 1, 4)]
        )
        with self.assertRaises(ValueError):
            layer.tile_at(-1, 1)

    def test_chunks_in_finite_map(self):
        node = element(
            '<layer id="1"><data encoding="csv">'
            '<chunk x="0" y="0" width="1" height="1">1</chunk></data></layer>'
        )
        with self.assertRaises(MalformedDocumentError):
            parse_tile_layer(node, False)

    def test_missing_data(self):
        with self.assertRaises(MalformedDocumentError):
            parse_tile_layer(element('<layer id="1"/>'), False)

    def test_xml_tiles(self):
        node = element('<layer id="1"><data><tile gid="1"/></data></layer>')
        with self.assertRaises(UnsupportedEncodingError):
            parse_tile_layer(node, False)

    def test_zstd(self):
        node = element(
            '<layer id="1" width="1" height="1">'
            '<data encoding="base64" compression="zstd">AAAAAA==</data></layer>'
        )
        with self.assertRaises(UnsupportedCompressionError):
            parse_tile_layer(node, False)


class LayerTreeTest(unittest.TestCase):
    def test_document_order_and_defaults(self):
        node = element(
            "<map>"
            '<properties><property name="p" value="1"/></properties>'
            '<tileset firstgid="1" source="a.tsx"/>'
            '<objectgroup id="2" name="objects"/>'
            '<imagelayer id="3" name="image"/>'
            '<layer id="1" name="tiles" width="1" height="1"><data encoding="csv">0</data></layer>'
            "<editorsettings/>"
            "</map>"
        )
        layers = parse_layers(node, False)
        self.assertEqual([i.name for i in layers], ["objects", "image", "tiles"])
        self.assertIsInstance(layers[0], ObjectLayer)
        self.assertIsInstance(layers[1], ImageLayer)
        self.assertIsNone(layers[1].image)
        for layer in layers:
            self.assertTrue(layer.visible)
            self.assertFalse(layer.locked)
            self.assertEqual(layer.opacity, 1.0)
            self.assertEqual(layer.parallax, Vector(1.0, 1.0))
            self.assertEqual(layer.offset, Vector(0.0, 0.0))
            self.assertIsNone(layer.tint_color)

    def test_layer_attributes(self):
        node = element(
            '<map><objectgroup id="2" name="o" class="c" visible="0" locked="1" '
            'opacity="0.25" offsetx="1.5" offsety="-2" parallaxx="0.5" '
            'parallaxy="2" tintcolor="#80ff0000" color="#00ff00" draworder="index"/></map>'
        )
        layer = parse_layers(node, False)[0]
        self.assertEqual(layer.id, 2)
        self.assertEqual(layer.class_, "c")
        self.assertFalse(layer.visible)
        self.assertTrue(layer.locked)
        self.assertEqual(layer.opacity, 0.25)
        self.assertEqual(layer.offset, Vector(1.5, -2.0))
        self.assertEqual(layer.parallax, Vector(0.5, 2.0))
        self.assertEqual(layer.tint_color, Color(255, 0, 0, 128))
        self.assertEqual(layer.color, Color(0, 255, 0))
        self.assertEqual(layer.draworder, "index")

    def test_nested_groups(self):
        node = element(
            '<map><group id="1" name="a"><group id="2" name="b">'
            '<objectgroup id="3" name="c"/></group></group></map>'
        )
        (outer,) = parse_layers(node, False)
        self.assertIsInstance(outer, Group)
        self.assertEqual([i.name for i in outer.iter_layers()], ["b", "c"])
        self.assertIsInstance(outer.layers[0].layers[0], ObjectLayer)

    def test_unknown_layer(self):
        with self.assertRaises(UnknownElementKindError) as cm:
            parse_layers(element("<map><sprites/></map>"), False)
        self.assertEqual(cm.exception.kind, "sprites")

    def test_bad_bool(self):
        with self.assertRaises(MalformedDocumentError):
            parse_layers(element('<map><group id="1" visible="true"/></map>'), False)


if __name__ == "__main__":
    unittest.main()
