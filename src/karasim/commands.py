# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Command-list executor.

A command program is a flat list of primitive commands run one at a time.
The runner keeps only an index into the list; the caller owns the world and
the list itself.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from karasim.errors import KaraError
from karasim.logging import get_logger
from karasim.world.actions import Command, apply_command, explain_blocked
from karasim.world.models import World

logger = get_logger(__name__)

NOT_STARTED = -1


class CommandStepResult(BaseModel):
    world: World
    index: int
    command: Command | None = None
    done: bool = False
    error: KaraError | None = None

    model_config = ConfigDict(frozen=True)


class CommandRunner:
    """Steps through a command list against a caller-supplied world."""

    def __init__(self, commands: Sequence[Command]):
        self.commands = list(commands)
        self.index = NOT_STARTED
        self.error: KaraError | None = None

    @property
    def done(self) -> bool:
        return self.error is not None or self.index >= len(self.commands) - 1

    def step(self, world: World) -> CommandStepResult:
        """Advance by one command and apply it.

        A command that leaves the world unchanged is reported as a blocked
        action; the index stays on it and the run halts.
        """
        if self.error is not None:
            return CommandStepResult(world=world, index=self.index, done=True, error=self.error)
        next_index = self.index + 1
        if next_index >= len(self.commands):
            return CommandStepResult(world=world, index=self.index, done=True)

        command = self.commands[next_index]
        self.index = next_index
        new_world = apply_command(world, command)
        if new_world is world:
            self.error = explain_blocked(world, command)
            logger.info("command_blocked", index=next_index, command=str(command))
            return CommandStepResult(
                world=world, index=next_index, command=command, done=True, error=self.error
            )
        return CommandStepResult(
            world=new_world,
            index=next_index,
            command=command,
            done=next_index >= len(self.commands) - 1,
        )

    def skip_to_end(self, world: World) -> CommandStepResult:
        """Apply every remaining command without intermediate results."""
        result = CommandStepResult(world=world, index=self.index, done=self.done, error=self.error)
        while not result.done:
            result = self.step(result.world)
        return result

    def reset(self) -> None:
        self.index = NOT_STARTED
        self.error = None

    def clamp(self) -> None:
        """Restart an index left past the end of a shortened list."""
        if self.index >= len(self.commands):
            self.reset()


def repeat_last_commands(commands: Sequence[Command], count: int, times: int) -> list[Command]:
    """Append the last ``count`` commands ``times`` more times.

    Invalid arguments return the list unchanged.
    """
    if count <= 0 or times <= 0 or count > len(commands):
        return list(commands)
    tail = list(commands[-count:])
    return list(commands) + tail * times
