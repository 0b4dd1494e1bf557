# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""KaraX ``.kara`` XML format for FSM programs.

States are referenced by name, not id, so names must be unique within a
program to round-trip. Wildcard conditions are not written: KaraX has no
value for "either", and leaving a sensor out already means the same thing.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections import Counter

from karasim.constants import KARA_ACTOR, KARAX_VERSION, STOP_STATE_ID, STOP_STATE_NAME
from karasim.errors import ParseError
from karasim.fsm.models import ActionType, FSMAction, FSMProgram, FSMState, FSMTransition
from karasim.ids import IdGenerator, SequentialIds, slugify
from karasim.interchange.world_format import XML_DECLARATION, find_element, parse_xml
from karasim.logging import get_logger
from karasim.world.detectors import Detector

logger = get_logger(__name__)

KARAX_COMMANDS = {
    "move": ActionType.MOVE,
    "turnLeft": ActionType.TURN_LEFT,
    "turnRight": ActionType.TURN_RIGHT,
    "putLeaf": ActionType.PLACE_CLOVER,
    "removeLeaf": ActionType.PICK_CLOVER,
}
ACTION_COMMANDS = {action: name for name, action in KARAX_COMMANDS.items()}

YES, NO = "1", "2"

SENSOR_DESCRIPTIONS = {
    Detector.TREE_FRONT: "tree in front?",
    Detector.TREE_LEFT: "tree to the left?",
    Detector.TREE_RIGHT: "tree to the right?",
    Detector.MUSHROOM_FRONT: "mushroom in front?",
    Detector.ON_LEAF: "leaf on the ground?",
}

_DETECTOR_NAMES = {detector.value: detector for detector in Detector}


def _float_attr(element: ET.Element, name: str, default: float) -> float:
    try:
        return float(element.get(name, default))
    except ValueError as exc:
        raise ParseError(f"Attribute {name} on <{element.tag}> is not a number") from exc


def _state_sensors(state: FSMState) -> list[Detector]:
    sensors = list(state.active_detectors)
    for transition in state.transitions:
        for detector, value in transition.detector_conditions.items():
            if value is not None and detector not in sensors:
                sensors.append(detector)
    return sensors


def export_fsm_xml(program: FSMProgram) -> str:
    """Serialize a program to ``.kara`` XML."""
    duplicates = [name for name, n in Counter(s.name for s in program.states).items() if n > 1]
    if duplicates:
        logger.warning("kara_duplicate_state_names", names=duplicates)

    start = program.get_state(program.start_state_id)
    root = ET.Element("XmlStateMachines", version=KARAX_VERSION)
    machine = ET.SubElement(
        root, "XmlStateMachine", actor=KARA_ACTOR, startState=start.name if start else ""
    )

    for state in program.states:
        xml_state = ET.SubElement(
            machine,
            "XmlState",
            finalstate="true" if state.id == program.stop_state_id else "false",
            name=state.name,
            x=f"{state.x:.1f}",
            y=f"{state.y:.1f}",
        )
        sensors = ET.SubElement(xml_state, "XmlSensors")
        for detector in _state_sensors(state):
            ET.SubElement(sensors, "XmlSensor", name=detector.value)

    for state in program.states:
        for transition in state.transitions:
            target = program.get_state(transition.target_state_id)
            if target is None:
                logger.warning(
                    "kara_transition_dropped", state=state.name, target=transition.target_state_id
                )
                continue
            xml_transition = ET.SubElement(
                machine, "XmlTransition", {"from": state.name, "to": target.name}
            )
            values = ET.SubElement(xml_transition, "XmlSensorValues")
            for detector, value in transition.required_conditions().items():
                ET.SubElement(
                    values, "XmlSensorValue", name=detector.value, value=YES if value else NO
                )
            commands = ET.SubElement(xml_transition, "XmlCommands")
            for action in transition.actions:
                ET.SubElement(commands, "XmlCommand", name=ACTION_COMMANDS[action.type])

    for detector, description in SENSOR_DESCRIPTIONS.items():
        ET.SubElement(
            root,
            "XmlSensorDefinition",
            description=description,
            identifier=detector.value,
            name=detector.value,
        )

    ET.indent(root, space="    ")
    return f"{XML_DECLARATION}\n{ET.tostring(root, encoding='unicode')}"


def parse_kara_file(content: str, ids: IdGenerator | None = None) -> FSMProgram:
    """Parse ``.kara`` XML into a program.

    The final state gets the id ``stop``; other ids come from ``ids``.
    Transitions naming unknown states and unknown commands are skipped. A
    STOP state is added when the file marks none as final.

    Raises:
        ParseError: Malformed XML or no ``XmlStateMachine`` element
    """
    ids = ids or SequentialIds()
    root = parse_xml(content, ".kara")
    machine = find_element(root, "XmlStateMachine")
    if machine is None:
        raise ParseError("Missing XmlStateMachine element in .kara file")

    start_name = machine.get("startState", "")
    states: dict[str, FSMState] = {}
    name_to_id: dict[str, str] = {}
    stop_id: str | None = None
    start_id: str | None = None

    for xml_state in machine.iter("XmlState"):
        name = xml_state.get("name") or "Unnamed"
        if name in name_to_id:
            logger.warning("kara_duplicate_state_skipped", name=name)
            continue
        final = xml_state.get("finalstate") == "true"
        if final and stop_id is None:
            state_id = STOP_STATE_ID
            stop_id = state_id
        else:
            state_id = ids(f"state-{slugify(name)}")
        active = [
            _DETECTOR_NAMES[sensor.get("name")]
            for sensor in xml_state.iter("XmlSensor")
            if sensor.get("name") in _DETECTOR_NAMES
        ]
        name_to_id[name] = state_id
        if name == start_name:
            start_id = state_id
        states[state_id] = FSMState(
            id=state_id,
            name=name,
            x=_float_attr(xml_state, "x", 100.0),
            y=_float_attr(xml_state, "y", 100.0),
            active_detectors=active,
        )

    transitions: dict[str, list[FSMTransition]] = {state_id: [] for state_id in states}
    for xml_transition in machine.iter("XmlTransition"):
        source = name_to_id.get(xml_transition.get("from", ""))
        target = name_to_id.get(xml_transition.get("to", ""))
        if source is None or target is None or source == stop_id:
            logger.warning(
                "kara_transition_skipped",
                source=xml_transition.get("from"),
                target=xml_transition.get("to"),
            )
            continue
        conditions: dict[Detector, bool | None] = {}
        for sensor_value in xml_transition.iter("XmlSensorValue"):
            detector = _DETECTOR_NAMES.get(sensor_value.get("name", ""))
            value = sensor_value.get("value")
            if detector is not None and value in (YES, NO):
                conditions[detector] = value == YES
        actions = []
        for command in xml_transition.iter("XmlCommand"):
            action = KARAX_COMMANDS.get(command.get("name", ""))
            if action is None:
                logger.debug("kara_command_skipped", name=command.get("name"))
                continue
            actions.append(FSMAction(type=action))
        transitions[source].append(
            FSMTransition(
                id=ids("transition"),
                target_state_id=target,
                detector_conditions=conditions,
                actions=actions,
            )
        )

    ordered = [
        state.model_copy(update={"transitions": transitions[state_id]})
        for state_id, state in states.items()
    ]
    if stop_id is None:
        stop_id = STOP_STATE_ID
        ordered.append(FSMState(id=stop_id, name=STOP_STATE_NAME, x=300, y=100))

    return FSMProgram(states=ordered, start_state_id=start_id, stop_state_id=stop_id)
