"""Engine-facing remote store interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pp_envvars.resources.variables import VariableDefinition, VariableValue


@runtime_checkable
class RemoteStoreClient(Protocol):
    """Remote key-value store holding environment variable definitions and values.

    Implementations must already be authenticated. Every method raises
    :class:`~pp_envvars.engine.errors.RemoteError` on a non-2xx response or a
    transport failure.
    """

    def list_definitions(self) -> Sequence[VariableDefinition]:
        """Return every definition, fully materialized across pages."""
        ...

    def list_values(self, definition_id: str) -> Sequence[VariableValue]:
        """Return the value records bound to *definition_id* (zero or one expected)."""
        ...

    def create_value(self, definition_id: str, value: str) -> VariableValue:
        """Bind a new value record to *definition_id*."""
        ...

    def update_value(self, value_id: str, value: str) -> None:
        """Overwrite the value of an existing value record."""
        ...
