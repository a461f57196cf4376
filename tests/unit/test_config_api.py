"""Tests for the convenience plan/apply API."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

from pp_envvars.config import ConfigError, apply, connect, desired_state, plan
from pp_envvars.core.provider import DataverseProvider
from pp_envvars.engine.errors import RemoteError
from pp_envvars.engine.types import Outcome

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from pp_envvars.config.schema import Config
    from tests.unit.conftest import FakeStore

_YAML = """\
provider:
  environment_url: https://contoso-uat.crm.dynamics.com
  tenant_id: tenant
  client_id: app
  client_secret: secret
values: uat.json
"""


@pytest.fixture
def cfg(make_config: Callable[..., Config], tmp_path: Path) -> Config:
    (tmp_path / "uat.json").write_text('{"cr_ApiBaseUrl": "https://api.uat.example.com"}')
    return make_config(_YAML)


class TestDesiredState:
    def test_reads_configured_file(self, cfg: Config) -> None:
        assert desired_state(cfg) == {"cr_ApiBaseUrl": "https://api.uat.example.com"}

    def test_override_path(self, cfg: Config, tmp_path: Path) -> None:
        other = tmp_path / "prod.json"
        other.write_text('{"cr_ApiBaseUrl": "https://api.prod.example.com"}')
        assert desired_state(cfg, other) == {"cr_ApiBaseUrl": "https://api.prod.example.com"}

    def test_no_values_file(self, make_config: Callable[..., Config]) -> None:
        cfg = make_config("provider: {}\n")
        with pytest.raises(ConfigError, match="No values file"):
            desired_state(cfg)


class TestPlanApply:
    def test_plan_does_not_write(self, cfg: Config, store: FakeStore) -> None:
        store.define("cr_ApiBaseUrl")
        with patch(
            "pp_envvars.config._provider_from_config",
            return_value=DataverseProvider.from_client(store),
        ):
            report = plan(cfg)

        assert report.dry_run
        assert report.outcomes[0].outcome == Outcome.CREATED
        assert store.writes == []

    def test_apply_writes(self, cfg: Config, store: FakeStore) -> None:
        store.define("cr_ApiBaseUrl", "https://api.old.example.com")
        events: list[str] = []
        with patch(
            "pp_envvars.config._provider_from_config",
            return_value=DataverseProvider.from_client(store),
        ):
            report = apply(cfg, progress=lambda name, event: events.append(event))

        assert not report.dry_run
        assert report.updated == 1
        assert store.value_of("cr_ApiBaseUrl") == "https://api.uat.example.com"
        assert events == ["start", "done"]

    def test_empty_values_skips_authentication(self, cfg: Config, tmp_path: Path) -> None:
        (tmp_path / "uat.json").write_text("{}")
        with patch("pp_envvars.core.provider.acquire_token") as mock_acquire:
            report = apply(cfg)

        assert report.outcomes == ()
        assert report.ok
        mock_acquire.assert_not_called()

    @pytest.mark.parametrize(
        ("field", "env_key"),
        [
            ("environment_url", "PP_ENVIRONMENT_URL"),
            ("tenant_id", "PP_TENANT_ID"),
            ("client_id", "PP_CLIENT_ID"),
            ("client_secret", "PP_CLIENT_SECRET"),
        ],
    )
    def test_missing_provider_field(
        self, make_config: Callable[..., Config], tmp_path: Path, field: str, env_key: str
    ) -> None:
        (tmp_path / "uat.json").write_text("{}")
        yaml = "\n".join(line for line in _YAML.splitlines() if not line.strip().startswith(field))
        cfg = make_config(yaml + "\n")

        with pytest.raises(ConfigError, match=f"provider.{field} is required.*{env_key}"):
            plan(cfg)


class TestProviderLifecycle:
    def test_run_closes_the_provider_it_builds(self, cfg: Config, store: FakeStore) -> None:
        store.define("cr_ApiBaseUrl")
        with (
            patch(
                "pp_envvars.config._provider_from_config",
                return_value=DataverseProvider.from_client(store),
            ),
            patch.object(DataverseProvider, "close") as mock_close,
        ):
            plan(cfg)

        mock_close.assert_called_once()

    def test_closed_even_when_listing_fails(self, cfg: Config, store: FakeStore) -> None:
        store.failures["list_definitions"] = {"*"}
        with (
            patch(
                "pp_envvars.config._provider_from_config",
                return_value=DataverseProvider.from_client(store),
            ),
            patch.object(DataverseProvider, "close") as mock_close,
            pytest.raises(RemoteError),
        ):
            apply(cfg)

        mock_close.assert_called_once()

    def test_given_provider_is_reused_and_left_open(self, cfg: Config, store: FakeStore) -> None:
        store.define("cr_ApiBaseUrl")
        provider = DataverseProvider.from_client(store)
        with (
            patch("pp_envvars.config._provider_from_config") as mock_build,
            patch.object(DataverseProvider, "close") as mock_close,
        ):
            planned = plan(cfg, provider=provider)
            applied = apply(cfg, provider=provider)

        assert planned.created == 1
        assert applied.created == 1
        mock_build.assert_not_called()
        mock_close.assert_not_called()

    def test_connect_checks_required_fields(self, make_config: Callable[..., Config]) -> None:
        cfg = make_config("provider:\n  tenant_id: tenant\n")
        with pytest.raises(ConfigError, match="provider.environment_url is required"):
            connect(cfg)
