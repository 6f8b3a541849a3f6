"""Tests for TierQueryConfig and environment settings."""

import os
from pathlib import Path

import pytest

from tierscope.core.config import DEFAULT_TIER_SOURCES, TierQueryConfig
from tierscope.core.errors import ConfigurationError
from tierscope.core.models import Granularity
from tierscope.settings import get_settings

pytestmark = [pytest.mark.tier(0), pytest.mark.unit]

_ENV_VARS = (
    "TIERSCOPE_DB_PATH",
    "TIERSCOPE_ROW_CAP",
    "TIERSCOPE_FALLBACK_ENABLED",
    "TIERSCOPE_FALLBACK_LIMIT",
    "TIERSCOPE_MAX_WINDOW_DAYS",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    """Environment without tierscope variables and without an env file.

    os.environ is swapped for a copy because load_dotenv writes to it directly.
    """
    monkeypatch.setattr(os, "environ", dict(os.environ))
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TIERSCOPE_ENV_FILE", str(tmp_path / "absent.env"))
    return monkeypatch


class TestTierQueryConfig:
    def test_defaults(self) -> None:
        config = TierQueryConfig()

        assert config.row_cap == 10_000
        assert config.fallback_enabled is True
        assert config.fallback_limit == 100
        assert config.source_for(Granularity.TEN_MINUTES) == "metrics_10m_avg"

    def test_every_tier_must_be_mapped(self) -> None:
        sources = dict(DEFAULT_TIER_SOURCES)
        del sources[Granularity.ONE_HOUR]

        with pytest.raises(ConfigurationError, match="1h"):
            TierQueryConfig(tier_sources=sources)

    @pytest.mark.parametrize("name", ["metrics; DROP TABLE x", "1m_view", "", "a-b"])
    def test_source_names_must_be_identifiers(self, name: str) -> None:
        sources = {**DEFAULT_TIER_SOURCES, Granularity.ONE_MINUTE: name}

        with pytest.raises(ConfigurationError):
            TierQueryConfig(tier_sources=sources)

    @pytest.mark.parametrize("field", ["row_cap", "fallback_limit"])
    @pytest.mark.parametrize("value", [0, -1])
    def test_limits_must_be_positive(self, field: str, value: int) -> None:
        with pytest.raises(ConfigurationError, match=field):
            TierQueryConfig(**{field: value})


class TestGetSettings:
    def test_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = get_settings()

        assert settings.db_path == "rollups.db"
        assert settings.row_cap == 10_000
        assert settings.fallback_enabled is True
        assert settings.max_window.days == 30

    def test_environment_overrides(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("TIERSCOPE_DB_PATH", "/data/r.db")
        clean_env.setenv("TIERSCOPE_ROW_CAP", "500")
        clean_env.setenv("TIERSCOPE_FALLBACK_ENABLED", "off")
        clean_env.setenv("TIERSCOPE_MAX_WINDOW_DAYS", "7")

        settings = get_settings()
        config = settings.query_config()

        assert settings.db_path == "/data/r.db"
        assert config.row_cap == 500
        assert config.fallback_enabled is False
        assert settings.max_window.days == 7

    def test_env_file_is_loaded(
        self, clean_env: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        env_file = tmp_path / "tierscope.env"
        env_file.write_text("TIERSCOPE_FALLBACK_LIMIT=25\n")
        clean_env.setenv("TIERSCOPE_ENV_FILE", str(env_file))

        assert get_settings().fallback_limit == 25

    def test_real_environment_wins_over_env_file(
        self, clean_env: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        env_file = tmp_path / "tierscope.env"
        env_file.write_text("TIERSCOPE_ROW_CAP=1\n")
        clean_env.setenv("TIERSCOPE_ENV_FILE", str(env_file))
        clean_env.setenv("TIERSCOPE_ROW_CAP", "42")

        assert get_settings().row_cap == 42

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("TIERSCOPE_ROW_CAP", "lots"),
            ("TIERSCOPE_FALLBACK_ENABLED", "maybe"),
            ("TIERSCOPE_MAX_WINDOW_DAYS", "0"),
        ],
    )
    def test_invalid_values(
        self, clean_env: pytest.MonkeyPatch, name: str, value: str
    ) -> None:
        clean_env.setenv(name, value)

        with pytest.raises(ConfigurationError, match=name):
            get_settings()

    def test_invalid_row_cap_rejected_by_query_config(
        self, clean_env: pytest.MonkeyPatch
    ) -> None:
        clean_env.setenv("TIERSCOPE_ROW_CAP", "0")

        with pytest.raises(ConfigurationError):
            get_settings().query_config()
