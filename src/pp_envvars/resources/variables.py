"""Environment variable definition and value records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

DesiredState = Mapping[str, str]


class VariableDefinition(BaseModel):
    """An environment variable definition (the named slot).

    Definitions are owned by the remote store and only ever read.

    Attributes:
        definition_id: Remote-assigned identifier
        schema_name: Stable key, unique within the environment
        display_name: Human-readable label (advisory only)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    entity_set: ClassVar[str] = "environmentvariabledefinitions"
    select: ClassVar[tuple[str, ...]] = (
        "environmentvariabledefinitionid",
        "schemaname",
        "displayname",
    )

    definition_id: str = Field(alias="environmentvariabledefinitionid")
    schema_name: str = Field(alias="schemaname")
    display_name: str | None = Field(default=None, alias="displayname")


class VariableValue(BaseModel):
    """The value bound to a definition in one environment."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    entity_set: ClassVar[str] = "environmentvariablevalues"
    select: ClassVar[tuple[str, ...]] = (
        "environmentvariablevalueid",
        "_environmentvariabledefinitionid_value",
        "value",
    )

    value_id: str = Field(alias="environmentvariablevalueid")
    definition_id: str | None = Field(default=None, alias="_environmentvariabledefinitionid_value")
    value: str | None = None
