"""
CLI tests for scripts/run_relay.py.

The run itself is mocked; these cover exit codes and wiring of flags.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from scripts import run_relay
from scripts.run_relay import EXIT_CONFIG, EXIT_OK, EXIT_RUN_FATAL, main

from newsrelay.delivery.engine import DeliveryError
from newsrelay.pipeline import RunSummary
from newsrelay.source.base import SourceError

ENV = {
    "SITE_URL": "https://example.com/dashboard",
    "DISCORD_WEBHOOK_URL": "https://discord.com/api/webhooks/1/token",
    "LOG_FILE": "processed.json",
}


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear relay env vars, skip .env loading and restore root logging."""
    for name in (*ENV, "DISCORD_WEBHOOK_URLS", "TRANSLATE_TARGET_LANGUAGE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(run_relay, "load_dotenv", lambda *args, **kwargs: False)

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def relay_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in ENV.items():
        monkeypatch.setenv(name, value)


class TestMain:
    """Tests for main()."""

    def test_missing_config_exits_2(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == EXIT_CONFIG
        assert "Missing required environment values" in capsys.readouterr().err

    @pytest.mark.usefixtures("relay_env")
    def test_success_prints_count(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        fake_run = AsyncMock(return_value=RunSummary(scraped=5, new=2, delivered=2))
        monkeypatch.setattr(run_relay, "run_relay", fake_run)

        assert main([]) == EXIT_OK
        assert "Processed 2 new item(s)." in capsys.readouterr().out
        fake_run.assert_awaited_once()

    @pytest.mark.usefixtures("relay_env")
    def test_dry_run_flag_sets_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake_run = AsyncMock(return_value=RunSummary(dry_run=True))
        monkeypatch.setattr(run_relay, "run_relay", fake_run)

        assert main(["--dry-run"]) == EXIT_OK
        config = fake_run.await_args.args[0]
        assert config.delivery.dry_run is True

    @pytest.mark.usefixtures("relay_env")
    @pytest.mark.parametrize(
        "error",
        [
            SourceError("dashboard returned 503", status_code=503),
            DeliveryError("webhook:0 rejected part 1/1", sink_name="webhook:0", status_code=404),
            RuntimeError("browser crashed"),
        ],
    )
    def test_run_failure_exits_1(self, monkeypatch: pytest.MonkeyPatch, error: Exception) -> None:
        monkeypatch.setattr(run_relay, "run_relay", AsyncMock(side_effect=error))
        assert main([]) == EXIT_RUN_FATAL

    def test_env_file_loaded(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        env_file = tmp_path / "relay.env"
        env_file.write_text("SITE_URL=https://example.com\n")
        calls: list[tuple[object, ...]] = []
        monkeypatch.setattr(run_relay, "load_dotenv", lambda *args, **kwargs: calls.append(args))

        main(["--env-file", str(env_file)])

        assert calls == [(env_file,)]
