"""Shared fixtures for unit tests."""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

import pytest

from pp_envvars.config import load
from pp_envvars.engine.errors import RemoteError
from pp_envvars.resources.variables import VariableDefinition, VariableValue

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from pp_envvars.config.schema import Config

_PP_ENV_VARS = (
    "PP_ENVIRONMENT_URL",
    "PP_TENANT_ID",
    "PP_CLIENT_ID",
    "PP_CLIENT_SECRET",
    "PP_AUTHORITY_HOST",
    "PP_TIMEOUT",
    "PP_LOG",
    "NO_COLOR",
)


@pytest.fixture(autouse=True)
def _clean_pp_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove PP_* env vars so unit tests don't leak host config."""
    for var in _PP_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class FakeStore:
    """In-memory remote store recording every call.

    ``failures`` maps a method name to a set of ids (definition or value id)
    for which that method raises ``RemoteError``.
    """

    def __init__(self) -> None:
        self.definitions: list[VariableDefinition] = []
        self.values: list[VariableValue] = []
        self.calls: list[tuple[str, ...]] = []
        self.failures: dict[str, set[str]] = {}
        self._ids = itertools.count(1)

    def define(self, schema_name: str, value: str | None = None) -> str:
        definition_id = f"def-{next(self._ids)}"
        self.definitions.append(
            VariableDefinition(definition_id=definition_id, schema_name=schema_name)
        )
        if value is not None:
            self.bind(definition_id, value)
        return definition_id

    def bind(self, definition_id: str, value: str) -> str:
        value_id = f"val-{next(self._ids)}"
        self.values.append(
            VariableValue(value_id=value_id, definition_id=definition_id, value=value)
        )
        return value_id

    def _maybe_fail(self, method: str, key: str) -> None:
        if key in self.failures.get(method, set()):
            raise RemoteError("Internal Server Error", status_code=500)

    def value_of(self, schema_name: str) -> str | None:
        ids = {d.definition_id for d in self.definitions if d.schema_name == schema_name}
        for v in self.values:
            if v.definition_id in ids:
                return v.value
        return None

    @property
    def writes(self) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] in ("create_value", "update_value")]

    def list_definitions(self) -> list[VariableDefinition]:
        self.calls.append(("list_definitions",))
        self._maybe_fail("list_definitions", "*")
        return list(self.definitions)

    def list_values(self, definition_id: str) -> list[VariableValue]:
        self.calls.append(("list_values", definition_id))
        self._maybe_fail("list_values", definition_id)
        return [v for v in self.values if v.definition_id == definition_id]

    def create_value(self, definition_id: str, value: str) -> VariableValue:
        self.calls.append(("create_value", definition_id, value))
        self._maybe_fail("create_value", definition_id)
        self.bind(definition_id, value)
        return self.values[-1]

    def update_value(self, value_id: str, value: str) -> None:
        self.calls.append(("update_value", value_id, value))
        self._maybe_fail("update_value", value_id)
        self.values = [
            v.model_copy(update={"value": value}) if v.value_id == value_id else v
            for v in self.values
        ]


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """Factory fixture: write YAML + optional .env, return loaded Config."""

    def _make(yaml_str: str, *, dotenv: str | None = None) -> Config:
        (tmp_path / "config.yaml").write_text(yaml_str)
        if dotenv is not None:
            (tmp_path / ".env").write_text(dotenv)
        return load(tmp_path / "config.yaml")

    return _make
