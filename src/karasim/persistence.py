# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Storage for scenario progress."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from karasim.errors import StorageError
from karasim.logging import get_logger
from karasim.scenarios.progress import ScenarioProgress

logger = get_logger(__name__)


class ProgressStore(Protocol):
    """Port the scenario layer saves completions through."""

    def load_all(self) -> list[ScenarioProgress]: ...

    def get(self, scenario_id: str) -> ScenarioProgress | None: ...

    def save(self, progress: ScenarioProgress) -> None: ...

    def clear(self) -> None: ...


class MemoryProgressStore:
    """Progress kept for the lifetime of the process."""

    def __init__(self) -> None:
        self._records: dict[str, ScenarioProgress] = {}

    def load_all(self) -> list[ScenarioProgress]:
        return list(self._records.values())

    def get(self, scenario_id: str) -> ScenarioProgress | None:
        return self._records.get(scenario_id)

    def save(self, progress: ScenarioProgress) -> None:
        self._records[progress.scenario_id] = progress

    def clear(self) -> None:
        self._records.clear()


class ProgressFile(BaseModel):
    """On-disk shape of the progress file."""

    version: int = 1
    progress: list[ScenarioProgress] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class JsonFileProgressStore:
    """Progress persisted to a JSON file.

    Writes go to a temporary sibling first and replace the file, so a failed
    write never leaves a half-written progress file behind.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> list[ScenarioProgress]:
        if not self.path.exists():
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not read {self.path}: {exc}", reason="io") from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StorageError(
                f"Progress file {self.path} is not valid JSON", line=exc.lineno, reason="corrupt"
            ) from exc
        if not isinstance(data, dict) or not isinstance(data.get("progress", []), list):
            raise StorageError(f"Progress file {self.path} has an unexpected shape", reason="corrupt")

        records: list[ScenarioProgress] = []
        for entry in data.get("progress", []):
            try:
                records.append(ScenarioProgress.model_validate(entry))
            except ValidationError:
                logger.warning("progress_entry_dropped", path=str(self.path), entry=entry)
        return records

    def _write(self, records: list[ScenarioProgress]) -> None:
        state = ProgressFile(progress=records)
        tmp = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(state.model_dump(mode="json"), indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            raise StorageError(f"Could not write {self.path}: {exc}", reason="io") from exc

    def load_all(self) -> list[ScenarioProgress]:
        return self._read()

    def get(self, scenario_id: str) -> ScenarioProgress | None:
        for record in self._read():
            if record.scenario_id == scenario_id:
                return record
        return None

    def save(self, progress: ScenarioProgress) -> None:
        records = [r for r in self._read() if r.scenario_id != progress.scenario_id]
        records.append(progress)
        self._write(records)
        logger.debug("progress_saved", path=str(self.path), scenario_id=progress.scenario_id)

    def clear(self) -> None:
        self._write([])
