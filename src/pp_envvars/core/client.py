"""Dataverse Web API client for environment variables."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from pp_envvars.engine.errors import RemoteError
from pp_envvars.resources.variables import VariableDefinition, VariableValue

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "v9.2"
DEFAULT_TIMEOUT = 30.0

M = TypeVar("M", bound=BaseModel)


def _parse(model: type[M], record: Any) -> M:
    try:
        return model.model_validate(record)
    except ValidationError as exc:
        raise RemoteError(f"Unexpected {model.__name__} record: {exc}") from exc


class DataverseClient:
    """Thin ``requests`` wrapper over the Dataverse environment variable tables.

    Every request carries the bearer token and a bounded timeout. Non-2xx
    responses and transport failures surface as :class:`RemoteError`.
    """

    def __init__(
        self,
        environment_url: str,
        access_token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        api_version: str = DEFAULT_API_VERSION,
        session: requests.Session | None = None,
    ) -> None:
        self.environment_url = environment_url.rstrip("/")
        self.api_base = f"{self.environment_url}/api/data/{api_version}"
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
                "Content-Type": "application/json; charset=utf-8",
                "OData-MaxVersion": "4.0",
                "OData-Version": "4.0",
            }
        )

    def _url(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.api_base}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._url(path)
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise RemoteError(f"{method} {url} failed: {exc}") from exc
        if not 200 <= response.status_code < 300:
            message = response.text or response.reason or ""
            raise RemoteError(message, status_code=response.status_code)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteError(
                f"Invalid JSON in response to {method} {url}", status_code=response.status_code
            ) from exc

    def _get_all(self, path: str, params: dict[str, str]) -> list[dict[str, Any]]:
        """GET a collection, following ``@odata.nextLink`` until exhausted."""
        records: list[dict[str, Any]] = []
        page: Any = self._request("GET", path, params=params)
        while True:
            records.extend(page.get("value", []))
            next_link = page.get("@odata.nextLink")
            if not next_link:
                return records
            page = self._request("GET", next_link)

    def list_definitions(self) -> list[VariableDefinition]:
        records = self._get_all(
            VariableDefinition.entity_set,
            {"$select": ",".join(VariableDefinition.select)},
        )
        return [_parse(VariableDefinition, r) for r in records]

    def list_values(self, definition_id: str) -> list[VariableValue]:
        records = self._get_all(
            VariableValue.entity_set,
            {
                "$select": ",".join(VariableValue.select),
                "$filter": f"_environmentvariabledefinitionid_value eq {definition_id}",
            },
        )
        return [_parse(VariableValue, r) for r in records]

    def create_value(self, definition_id: str, value: str) -> VariableValue:
        body = {
            "EnvironmentVariableDefinitionId@odata.bind": (
                f"/{VariableDefinition.entity_set}({definition_id})"
            ),
            "value": value,
        }
        record = self._request(
            "POST",
            VariableValue.entity_set,
            json=body,
            headers={"Prefer": "return=representation"},
        )
        created = _parse(VariableValue, record)
        logger.debug("Created value %s for definition %s", created.value_id, definition_id)
        return created

    def update_value(self, value_id: str, value: str) -> None:
        self._request("PATCH", f"{VariableValue.entity_set}({value_id})", json={"value": value})
        logger.debug("Updated value %s", value_id)

    def close(self) -> None:
        self.session.close()
