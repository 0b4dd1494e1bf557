# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""The four text dialects and their shared vocabulary."""

from __future__ import annotations

from enum import StrEnum
from pathlib import PurePath

from karasim.world.actions import Command
from karasim.world.detectors import Detector


class Dialect(StrEnum):
    JAVA = "JavaKara"
    PYTHON = "PythonKara"
    JAVASCRIPT = "JavaScriptKara"
    RUBY = "RubyKara"

    @property
    def entry_name(self) -> str:
        return "my_program" if self in (Dialect.PYTHON, Dialect.RUBY) else "myProgram"

    @property
    def uses_braces(self) -> bool:
        return self in (Dialect.JAVA, Dialect.JAVASCRIPT)

    @property
    def extension(self) -> str:
        return FILE_EXTENSIONS[self]


# Receiver every command and sensor is called on
RECEIVER = "kara"

COMMAND_NAMES: dict[str, Command] = {
    "move": Command.MOVE_FORWARD,
    "turnLeft": Command.TURN_LEFT,
    "turn_left": Command.TURN_LEFT,
    "turnRight": Command.TURN_RIGHT,
    "turn_right": Command.TURN_RIGHT,
    "putLeaf": Command.PLACE_CLOVER,
    "put_leaf": Command.PLACE_CLOVER,
    "placeClover": Command.PLACE_CLOVER,
    "place_clover": Command.PLACE_CLOVER,
    "removeLeaf": Command.PICK_CLOVER,
    "remove_leaf": Command.PICK_CLOVER,
    "pickClover": Command.PICK_CLOVER,
    "pick_clover": Command.PICK_CLOVER,
}

SENSOR_NAMES: dict[str, Detector] = {
    "treeFront": Detector.TREE_FRONT,
    "tree_front": Detector.TREE_FRONT,
    "treeLeft": Detector.TREE_LEFT,
    "tree_left": Detector.TREE_LEFT,
    "treeRight": Detector.TREE_RIGHT,
    "tree_right": Detector.TREE_RIGHT,
    "mushroomFront": Detector.MUSHROOM_FRONT,
    "mushroom_front": Detector.MUSHROOM_FRONT,
    "onLeaf": Detector.ON_LEAF,
    "on_leaf": Detector.ON_LEAF,
}

FILE_EXTENSIONS: dict[Dialect, str] = {
    Dialect.JAVA: ".java",
    Dialect.PYTHON: ".py",
    Dialect.JAVASCRIPT: ".js",
    Dialect.RUBY: ".rb",
}

MIME_TYPES: dict[Dialect, str] = {
    Dialect.JAVA: "text/x-java-source",
    Dialect.PYTHON: "text/x-python",
    Dialect.JAVASCRIPT: "text/javascript",
    Dialect.RUBY: "text/x-ruby",
}

METHOD_EXAMPLES: dict[Dialect, str] = {
    Dialect.JAVA: "void myProgram() {\n  kara.move();\n}",
    Dialect.PYTHON: "def my_program(self):\n    kara.move()",
    Dialect.JAVASCRIPT: "function myProgram() {\n  kara.move();\n}",
    Dialect.RUBY: "def my_program\n  kara.move\nend",
}

DEFAULT_TEMPLATES: dict[Dialect, str] = {
    Dialect.JAVA: """\
import javakara.JavaKaraProgram;

/*
 * COMMANDS:
 *   kara.move()             kara.turnRight()        kara.turnLeft()
 *   kara.putLeaf()          kara.removeLeaf()
 * SENSORS:
 *   kara.treeFront()        kara.treeLeft()         kara.treeRight()
 *   kara.mushroomFront()    kara.onLeaf()
 */
public class MyProgram extends JavaKaraProgram {
    //
    // you can define your methods here:
    //
    public void myProgram() {
        // put your main program here, for example:
        while (!kara.treeFront()) {
            kara.move();
        }
    }
}
""",
    Dialect.PYTHON: '''\
from pythonkara import PythonKaraProgram

"""
COMMANDS:
    kara.move()             kara.turn_right()       kara.turn_left()
    kara.put_leaf()         kara.remove_leaf()
SENSORS:
    kara.tree_front()       kara.tree_left()        kara.tree_right()
    kara.mushroom_front()   kara.on_leaf()
"""

class MyProgram(PythonKaraProgram):
    def my_program(self):
        # put your main program here, for example:
        while not kara.tree_front():
            kara.move()
''',
    Dialect.JAVASCRIPT: """\
// JavaScriptKara Program

/*
 * COMMANDS:
 *   kara.move()             kara.turnRight()        kara.turnLeft()
 *   kara.putLeaf()          kara.removeLeaf()
 * SENSORS:
 *   kara.treeFront()        kara.treeLeft()         kara.treeRight()
 *   kara.mushroomFront()    kara.onLeaf()
 */

function myProgram() {
    // put your main program here, for example:
    while (!kara.treeFront()) {
        kara.move();
    }
}
""",
    Dialect.RUBY: """\
require 'rubykara'

# COMMANDS:
#   kara.move               kara.turn_right         kara.turn_left
#   kara.put_leaf           kara.remove_leaf
# SENSORS:
#   kara.tree_front?        kara.tree_left?         kara.tree_right?
#   kara.mushroom_front?    kara.on_leaf?

class MyProgram < RubyKaraProgram
  def my_program
    # put your main program here, for example:
    while !kara.tree_front?
      kara.move
    end
  end
end
""",
}


def default_template(dialect: Dialect) -> str:
    return DEFAULT_TEMPLATES[dialect]


def method_example(dialect: Dialect) -> str:
    return METHOD_EXAMPLES[dialect]


def dialect_for_filename(name: str) -> Dialect | None:
    """Dialect matching a file's extension, if any."""
    suffix = PurePath(name).suffix.lower()
    for dialect, extension in FILE_EXTENSIONS.items():
        if extension == suffix:
            return dialect
    return None


def available_commands(dialect: Dialect) -> str:
    """Comma-separated command names in the dialect's naming style."""
    if dialect.uses_braces:
        return "move, turnLeft, turnRight, putLeaf, removeLeaf"
    return "move, turn_left, turn_right, put_leaf, remove_leaf"
