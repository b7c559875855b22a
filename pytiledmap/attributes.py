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
import re
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple
from xml.etree import ElementTree

from .errors import MalformedDocumentError, MissingRequiredAttributeError
from .objects import Color, Point, Property, PropertyType

__all__ = (
    "convert_property",
    "convert_to_bool",
    "getter",
    "parse_int_list",
    "parse_points",
    "parse_properties",
    "require",
    "to_bool",
    "to_color",
    "to_float",
    "to_int",
)

logger = logging.getLogger(__name__)

# Tiled writes numbers in the C locale
_int_pattern = re.compile(r"[+-]?[0-9]+\Z")
_float_pattern = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?\Z")
_color_pattern = re.compile(r"#?([0-9a-fA-F]{6}|[0-9a-fA-F]{8})\Z")


def to_int(value: str) -> int:
    """Convert text to int using the invariant decimal format.

    Raises:
        ValueError: if `value` is not a plain decimal integer.

    """
    text = value.strip()
    if not _int_pattern.match(text):
        raise ValueError('cannot parse "{}" as int'.format(value))
    return int(text)


def to_float(value: str) -> float:
    """Convert text to float using a period as decimal separator.

    Raises:
        ValueError: if `value` is not a finite decimal number.

    """
    text = value.strip()
    if not _float_pattern.match(text):
        raise ValueError('cannot parse "{}" as float'.format(value))
    return float(text)


def to_bool(value: str) -> bool:
    """Convert a Tiled boolean attribute; only "1" and "0" are valid."""
    if value == "1":
        return True
    if value == "0":
        return False
    raise ValueError('cannot parse "{}" as bool'.format(value))


def to_color(value: str) -> Color:
    """Convert "#RRGGBB" or "#AARRGGBB" to a Color.

    Eight digit colors store the alpha channel first.

    """
    text = value.strip()
    if not _color_pattern.match(text):
        raise ValueError('cannot parse "{}" as color'.format(value))
    text = text.lstrip("#")
    channels = [int(text[i : i + 2], 16) for i in range(0, len(text), 2)]
    if len(channels) == 3:
        return Color(*channels)
    a, r, g, b = channels
    return Color(r, g, b, a)


def convert_to_bool(value: Any) -> bool:
    """Convert a few common variations of "true" and "false" to boolean

    Used for property values, where Tiled writes "true" and "false".

    Raises:
        ValueError: If `value` cannot be converted to a boolean.

    """
    value = str(value).strip()
    if value:
        value = value.lower()[0]
        if value in ("1", "y", "t"):
            return True
        if value in ("-", "0", "n", "f"):
            return False
    else:
        return False
    raise ValueError('cannot parse "{}" as bool'.format(value))


# casting for properties type
prop_type = {
    PropertyType.BOOL: convert_to_bool,
    PropertyType.COLOR: to_color,
    PropertyType.FILE: str,
    PropertyType.FLOAT: to_float,
    PropertyType.INT: to_int,
    PropertyType.OBJECT: to_int,
    PropertyType.STRING: str,
}


def convert_property(prop: Property) -> Any:
    """Return the value of a property as a python type

    Class properties return a dict of their converted members.  Empty color
    properties return None, as Tiled writes "" for an unset color.

    Raises:
        ValueError: if the text does not match the declared type.

    """
    if prop.type is PropertyType.CLASS:
        return {name: convert_property(member) for name, member in prop.members.items()}
    value = prop.value if prop.value is not None else ""
    if prop.type is PropertyType.COLOR and not value:
        return None
    return prop_type[prop.type](value)


def _convert(node: ElementTree.Element, key: str, value: str, type: Callable):
    try:
        return type(value)
    except ValueError as e:
        msg = 'Element <{0}> has invalid attribute {1}="{2}": {3}'.format(
            node.tag, key, value, e
        )
        logger.error(msg)
        raise MalformedDocumentError(msg) from e


def getter(node: ElementTree.Element):
    """Return a function that reads optional attributes of `node`

    The returned function has the signature ``get(key, type=None,
    default=None)``.  Missing attributes return the default, which is never
    converted.

    """
    attrib = node.attrib

    def get(key: str, type: Optional[Callable] = None, default: Any = None):
        try:
            value = attrib[key]
        except KeyError:
            return default
        if type is not None:
            return _convert(node, key, value, type)
        return value

    return get


def require(node: ElementTree.Element, key: str, type: Optional[Callable] = None):
    """Return a required attribute, converted by `type` if given

    Raises:
        MissingRequiredAttributeError: if the attribute is absent.
        MalformedDocumentError: if the value cannot be converted.

    """
    try:
        value = node.attrib[key]
    except KeyError:
        error = MissingRequiredAttributeError(node.tag, key)
        logger.error(str(error))
        raise error from None
    if type is not None:
        return _convert(node, key, value, type)
    return value


def parse_points(text: str) -> Tuple[Point, ...]:
    """Return tuple of points from a "x,y x,y ..." string"""
    points = list()
    for pair in text.split():
        coords = pair.split(",")
        if len(coords) != 2:
            raise ValueError('cannot parse "{}" as point'.format(pair))
        points.append(Point(to_float(coords[0]), to_float(coords[1])))
    return tuple(points)


def parse_int_list(text: str, empty: Optional[int] = None) -> Tuple[int, ...]:
    """Return tuple of ints from a comma separated string

    Empty entries are replaced with `empty`, or rejected if it is None.

    """
    values = list()
    for token in text.split(","):
        if not token.strip() and empty is not None:
            values.append(empty)
        else:
            values.append(to_int(token))
    return tuple(values)


def parse_properties(node: ElementTree.Element) -> Mapping[str, Property]:
    """Parse the <properties> child of a node and return a read-only mapping

    Values stay as text; see ``Property.convert``.  Multi-line string
    properties store their value as element text instead of an attribute.

    """
    d = dict()
    for child in node.findall("properties"):
        for subnode in child.findall("property"):
            name = require(subnode, "name")
            type_name = subnode.get("type", "string")
            try:
                type = PropertyType(type_name)
            except ValueError:
                logger.info(
                    "Type {} Not a built-in type. Defaulting to string-cast.".format(
                        type_name
                    )
                )
                type = PropertyType.STRING

            value = subnode.get("value")
            if value is None and type is not PropertyType.CLASS:
                value = subnode.text or ""
            members = parse_properties(subnode)
            d[name] = Property(
                name=name,
                type=type,
                value=value,
                property_type=subnode.get("propertytype"),
                members=members,
            )
    return MappingProxyType(d)
