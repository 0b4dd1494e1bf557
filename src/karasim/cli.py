# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from pathlib import Path

import click

from karasim.commands import CommandRunner
from karasim.errors import KaraError, KaraException
from karasim.fsm.executor import execute_fsm_to_completion, validate_fsm_program
from karasim.interchange import (
    commands_from_json,
    export_world_xml,
    parse_fsm_content,
    parse_world_content,
    world_to_json,
)
from karasim.interpreter.dialects import Dialect, dialect_for_filename
from karasim.interpreter.runtime import extract_commands
from karasim.logging import configure_logging
from karasim.paths import progress_path
from karasim.persistence import JsonFileProgressStore
from karasim.scenarios import builtin_scenarios, get_scenario, record_completion
from karasim.settings import Settings
from karasim.world.models import CellType, Direction, World
from karasim.world.templates import TEMPLATES, template_by_name

OUTPUT_FORMATS = ["text", "json", "xml"]

_CELL_GLYPHS = {
    CellType.EMPTY: ".",
    CellType.TREE: "T",
    CellType.MUSHROOM: "M",
    CellType.CLOVER: "*",
}
_KARA_GLYPHS = {
    Direction.NORTH: "^",
    Direction.EAST: ">",
    Direction.SOUTH: "v",
    Direction.WEST: "<",
}


def render_world(world: World) -> str:
    """Plain-text picture of a world, one line per row."""
    position = world.character.position
    lines = []
    for y, row in enumerate(world.grid):
        glyphs = [_CELL_GLYPHS[cell] for cell in row]
        if position.y == y and 0 <= position.x < world.width:
            glyphs[position.x] = _KARA_GLYPHS[world.character.direction]
        lines.append(" ".join(glyphs))
    lines.append(f"inventory: {world.character.inventory}")
    return "\n".join(lines)


def _format_world(world: World, output: str) -> str:
    match output:
        case "json":
            return world_to_json(world)
        case "xml":
            return export_world_xml(world)
        case _:
            return render_world(world)


def _load_world(path: Path) -> World:
    try:
        return parse_world_content(path.read_text(encoding="utf-8"))
    except KaraException as e:
        raise click.ClickException(f"{path}: {e.message}") from e


def _finish(ctx: click.Context, world: World, error: KaraError | None, output: str) -> None:
    click.echo(_format_world(world, output))
    if error is not None:
        click.echo(f"Error ({error.kind}): {error.message}", err=True)
        ctx.exit(1)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--log-level", default=None, help="Override KARASIM_LOG_LEVEL.")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """karasim command line interface."""
    settings = Settings()
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings)
    ctx.obj = settings


@cli.command("run-commands")
@click.argument("world_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("commands_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", type=click.Choice(OUTPUT_FORMATS), default="text", show_default=True)
@click.pass_context
def run_commands(ctx: click.Context, world_file: Path, commands_file: Path, output: str) -> None:
    """Run a JSON command list against a world and print the final world."""
    world = _load_world(world_file)
    try:
        commands = commands_from_json(commands_file.read_text(encoding="utf-8"))
    except KaraException as e:
        raise click.ClickException(f"{commands_file}: {e.message}") from e
    result = CommandRunner(commands).skip_to_end(world)
    _finish(ctx, result.world, result.error, output)


@cli.command("run-fsm")
@click.argument("world_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("program_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-steps", type=int, default=None, help="Override KARASIM_MAX_FSM_STEPS.")
@click.option("--output", type=click.Choice(OUTPUT_FORMATS), default="text", show_default=True)
@click.pass_context
def run_fsm(
    ctx: click.Context,
    world_file: Path,
    program_file: Path,
    max_steps: int | None,
    output: str,
) -> None:
    """Run a .kara (or JSON) state machine against a world."""
    settings: Settings = ctx.obj
    world = _load_world(world_file)
    try:
        program = parse_fsm_content(program_file.read_text(encoding="utf-8"))
    except KaraException as e:
        raise click.ClickException(f"{program_file}: {e.message}") from e

    error = validate_fsm_program(program)
    if error is not None:
        raise click.ClickException(error.message)
    run = execute_fsm_to_completion(
        world, program, max_steps=max_steps or settings.max_fsm_steps
    )
    _finish(ctx, run.world, run.error, output)


@cli.command("run-code")
@click.argument("world_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("source_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--dialect",
    type=click.Choice([d.value for d in Dialect]),
    default=None,
    help="Language of the source file; guessed from its extension when omitted.",
)
@click.option("--max-steps", type=int, default=None, help="Override KARASIM_MAX_INTERPRETER_STEPS.")
@click.option("--output", type=click.Choice(OUTPUT_FORMATS), default="text", show_default=True)
@click.pass_context
def run_code(
    ctx: click.Context,
    world_file: Path,
    source_file: Path,
    dialect: str | None,
    max_steps: int | None,
    output: str,
) -> None:
    """Run a JavaKara, PythonKara, JavaScriptKara or RubyKara program."""
    settings: Settings = ctx.obj
    chosen = Dialect(dialect) if dialect else dialect_for_filename(source_file.name)
    if chosen is None:
        raise click.BadParameter(
            f"cannot tell the language of {source_file.name}", param_hint="--dialect"
        )
    world = _load_world(world_file)
    result = extract_commands(
        source_file.read_text(encoding="utf-8"),
        chosen,
        world,
        max_steps=max_steps or settings.max_interpreter_steps,
        max_idle_iterations=settings.max_idle_iterations,
    )
    _finish(ctx, result.world, result.error, output)


@cli.command("template")
@click.argument("name", type=click.Choice(sorted(TEMPLATES)))
@click.option("--output", type=click.Choice(OUTPUT_FORMATS), default="xml", show_default=True)
def template(name: str, output: str) -> None:
    """Print one of the built-in world templates."""
    click.echo(_format_world(template_by_name(name), output))


@cli.command("scenarios")
def scenarios() -> None:
    """List the built-in scenarios."""
    for scenario in builtin_scenarios():
        click.echo(f"{scenario.id:<24} {scenario.difficulty:<7} {scenario.title}")


@cli.command("solve")
@click.argument("scenario_id")
@click.argument("commands_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def solve(ctx: click.Context, scenario_id: str, commands_file: Path) -> None:
    """Check a command list against a scenario and record progress."""
    settings: Settings = ctx.obj
    scenario = get_scenario(scenario_id)
    if scenario is None:
        raise click.BadParameter(f"unknown scenario {scenario_id!r}", param_hint="SCENARIO_ID")
    try:
        commands = commands_from_json(commands_file.read_text(encoding="utf-8"))
    except KaraException as e:
        raise click.ClickException(f"{commands_file}: {e.message}") from e
    if not scenario.allows(commands):
        allowed = ", ".join(scenario.allowed_commands)
        raise click.ClickException(f"This scenario only allows: {allowed}")

    result = CommandRunner(commands).skip_to_end(scenario.initial_world())
    click.echo(render_world(result.world))
    if result.error is not None:
        click.echo(f"Error ({result.error.kind}): {result.error.message}", err=True)
        ctx.exit(1)
    if not scenario.is_complete(result.world):
        click.echo(f"Goal not reached: {scenario.goal.description}", err=True)
        ctx.exit(1)

    store = JsonFileProgressStore(progress_path(settings.data_root))
    try:
        progress = record_completion(store, scenario.id, len(commands))
    except KaraException as e:
        raise click.ClickException(e.message) from e
    click.echo(f"Solved {scenario.title} with {len(commands)} commands: {progress.stars} stars")


def main() -> None:
    cli.main()


if __name__ == "__main__":
    main()
