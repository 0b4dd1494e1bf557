# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""KaraX ``.world`` XML format.

    <XmlWorld sizex="8" sizey="6" version="KaraX 1.0 kara">
        <XmlWallPoints>          trees
        <XmlObstaclePoints>      mushrooms
        <XmlPaintedfieldPoints>  clovers (type="0")
        <XmlKaraList><XmlKara direction="0..3" name="Kara" x y/></XmlKaraList>
        <XmlStreetList/>
    </XmlWorld>

The format has no inventory, so imported characters start with none.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from karasim.constants import (
    DEFAULT_WORLD_HEIGHT,
    DEFAULT_WORLD_WIDTH,
    KARA_ACTOR,
    KARAX_VERSION,
    OFF_GRID,
)
from karasim.errors import ParseError
from karasim.world.models import Character, CellType, Direction, Position, World

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'

KARAX_DIRECTIONS = {
    0: Direction.NORTH,
    1: Direction.EAST,
    2: Direction.SOUTH,
    3: Direction.WEST,
}
DIRECTION_CODES = {direction: code for code, direction in KARAX_DIRECTIONS.items()}

_POINT_BLOCKS = (
    ("XmlWallPoints", CellType.TREE),
    ("XmlObstaclePoints", CellType.MUSHROOM),
    ("XmlPaintedfieldPoints", CellType.CLOVER),
)


def parse_xml(content: str, what: str) -> ET.Element:
    try:
        return ET.fromstring(content.strip())
    except ET.ParseError as exc:
        raise ParseError(f"Invalid XML format in {what} file", reason=str(exc)) from exc


def find_element(root: ET.Element, tag: str) -> ET.Element | None:
    if root.tag == tag:
        return root
    return root.find(f".//{tag}")


def int_attr(element: ET.Element, name: str, default: int) -> int:
    value = element.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(float(value))
    except ValueError as exc:
        raise ParseError(f'Attribute {name}="{value}" on <{element.tag}> is not a number') from exc


def parse_world_file(content: str) -> World:
    """Parse ``.world`` XML into a world.

    Missing point blocks count as empty and points outside the grid are
    ignored. A file without ``XmlKara`` centres the character facing north;
    explicit coordinates outside the grid put it off the grid.

    Raises:
        ParseError: Malformed XML or no ``XmlWorld`` element
    """
    root = parse_xml(content, ".world")
    xml_world = find_element(root, "XmlWorld")
    if xml_world is None:
        raise ParseError("Missing XmlWorld element in .world file")

    width = int_attr(xml_world, "sizex", DEFAULT_WORLD_WIDTH)
    height = int_attr(xml_world, "sizey", DEFAULT_WORLD_HEIGHT)
    if width < 1 or height < 1:
        raise ParseError(f"Invalid world size {width}x{height} in .world file")

    cells: dict[tuple[int, int], CellType] = {}
    for block, cell_type in _POINT_BLOCKS:
        for point in xml_world.findall(f"{block}/XmlPoint"):
            cells[(int_attr(point, "x", 0), int_attr(point, "y", 0))] = cell_type

    character = Character(position=Position(x=width // 2, y=height // 2))
    kara = xml_world.find("XmlKaraList/XmlKara")
    if kara is not None:
        x, y = int_attr(kara, "x", width // 2), int_attr(kara, "y", height // 2)
        if not (0 <= x < width and 0 <= y < height):
            x, y = OFF_GRID
        direction = KARAX_DIRECTIONS.get(int_attr(kara, "direction", 0), Direction.NORTH)
        character = Character(position=Position(x=x, y=y), direction=direction)

    return World.blank(width, height, character=character, cells=cells)


def export_world_xml(world: World) -> str:
    """Serialize a world to ``.world`` XML."""
    root = ET.Element(
        "XmlWorld", sizex=str(world.width), sizey=str(world.height), version=KARAX_VERSION
    )
    for block, cell_type in _POINT_BLOCKS:
        element = ET.SubElement(root, block)
        for x, y in world.positions_of(cell_type):
            attrs = {"type": "0"} if cell_type is CellType.CLOVER else {}
            ET.SubElement(element, "XmlPoint", attrs, x=str(x), y=str(y))

    kara_list = ET.SubElement(root, "XmlKaraList")
    character = world.character
    if not character.position.off_grid:
        ET.SubElement(
            kara_list,
            "XmlKara",
            direction=str(DIRECTION_CODES[character.direction]),
            name=KARA_ACTOR,
            x=str(character.position.x),
            y=str(character.position.y),
        )
    ET.SubElement(root, "XmlStreetList")

    ET.indent(root, space="    ")
    return f"{XML_DECLARATION}\n{ET.tostring(root, encoding='unicode')}"
