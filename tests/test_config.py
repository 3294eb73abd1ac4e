"""
Config loading tests for RelayConfig.from_env.

Covers required values, list parsing, numeric/bool coercion and the
translation credential fallback.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from newsrelay.config import RelayConfig, split_list
from newsrelay.delivery.config import DEFAULT_CHART_URL_TEMPLATE

HOOK_A = "https://discord.com/api/webhooks/1/aaa"
HOOK_B = "https://discord.com/api/webhooks/2/bbb"


def make_env(**overrides: str) -> dict[str, str]:
    env = {
        "SITE_URL": "https://example.com/dashboard",
        "DISCORD_WEBHOOK_URL": HOOK_A,
        "LOG_FILE": "state/processed.json",
    }
    env.update(overrides)
    return env


class TestSplitList:
    """Tests for split_list."""

    def test_commas_and_whitespace(self) -> None:
        assert split_list(" a, b\nc ,,d ") == ["a", "b", "c", "d"]

    def test_empty(self) -> None:
        assert split_list("") == []
        assert split_list(None) == []


class TestRequiredValues:
    """Startup-fatal checks."""

    @pytest.mark.parametrize("name", ["SITE_URL", "DISCORD_WEBHOOK_URL", "LOG_FILE"])
    def test_missing_required(self, name: str) -> None:
        env = make_env()
        del env[name]
        with pytest.raises(ValueError, match=name):
            RelayConfig.from_env(env)

    def test_blank_counts_as_missing(self) -> None:
        with pytest.raises(ValueError, match="Missing required environment values: SITE_URL"):
            RelayConfig.from_env(make_env(SITE_URL="   "))

    def test_all_missing_listed(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            RelayConfig.from_env({})
        message = str(exc_info.value)
        assert "SITE_URL" in message
        assert "DISCORD_WEBHOOK_URL" in message
        assert "LOG_FILE" in message

    def test_invalid_site_url(self) -> None:
        with pytest.raises(ValueError, match="SITE_URL"):
            RelayConfig.from_env(make_env(SITE_URL="example.com"))


class TestDefaults:
    """Minimal environment."""

    def test_minimal_env(self) -> None:
        config = RelayConfig.from_env(make_env())

        assert config.state_file == Path("state/processed.json")
        assert config.max_items == 10
        assert [s.url for s in config.delivery.sinks] == [HOOK_A]
        assert config.delivery.formatter.site_url == "https://example.com/dashboard"
        assert config.delivery.formatter.tag == ""
        assert config.delivery.formatter.chart_url_template == DEFAULT_CHART_URL_TEMPLATE
        assert config.delivery.formatter.full_tweet_placeholders == frozenset({"00"})
        assert config.delivery.chunk_delay_ms == 500
        assert config.delivery.message_delay_ms == 1000
        assert config.delivery.dry_run is False
        assert config.source.headless is True
        assert config.translation.enabled is False
        assert config.log_level == "INFO"
        assert config.log_json is False


class TestOverrides:
    """Optional environment values."""

    def test_multiple_webhooks(self) -> None:
        config = RelayConfig.from_env(
            make_env(DISCORD_WEBHOOK_URL=f"{HOOK_A},{HOOK_B}", DISCORD_WEBHOOK_URLS=HOOK_B)
        )
        assert [s.url for s in config.delivery.sinks] == [HOOK_A, HOOK_B, HOOK_B]

    def test_webhook_timeout_applies_to_all(self) -> None:
        config = RelayConfig.from_env(
            make_env(DISCORD_WEBHOOK_URL=f"{HOOK_A} {HOOK_B}", WEBHOOK_TIMEOUT_S="7.5")
        )
        assert {s.timeout_s for s in config.delivery.sinks} == {7.5}

    def test_numeric_values(self) -> None:
        config = RelayConfig.from_env(
            make_env(
                MAX_NEWS_MESSAGES="25",
                MESSAGE_MAX_CHARS="1500",
                CHUNK_DELAY_MS="0",
                MESSAGE_DELAY_MS="250",
            )
        )
        assert config.max_items == 25
        assert config.delivery.formatter.max_chars == 1500
        assert config.delivery.chunk_delay_ms == 0
        assert config.delivery.message_delay_ms == 250

    def test_non_integer_rejected(self) -> None:
        with pytest.raises(ValueError, match="MAX_NEWS_MESSAGES must be an integer"):
            RelayConfig.from_env(make_env(MAX_NEWS_MESSAGES="ten"))

    def test_max_items_range(self) -> None:
        with pytest.raises(ValueError, match="MAX_NEWS_MESSAGES"):
            RelayConfig.from_env(make_env(MAX_NEWS_MESSAGES="0"))

    def test_bool_values(self) -> None:
        config = RelayConfig.from_env(make_env(HEADLESS="false", LOG_JSON="yes"))
        assert config.source.headless is False
        assert config.log_json is True

    def test_invalid_bool(self) -> None:
        with pytest.raises(ValueError, match="HEADLESS"):
            RelayConfig.from_env(make_env(HEADLESS="maybe"))

    def test_log_level_normalized(self) -> None:
        assert RelayConfig.from_env(make_env(LOG_LEVEL="debug")).log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValueError, match="LOG_LEVEL"):
            RelayConfig.from_env(make_env(LOG_LEVEL="chatty"))

    def test_placeholders_can_be_disabled(self) -> None:
        config = RelayConfig.from_env(make_env(FULL_TWEET_PLACEHOLDERS=""))
        assert config.delivery.formatter.full_tweet_placeholders == frozenset()

    def test_custom_placeholders(self) -> None:
        config = RelayConfig.from_env(make_env(FULL_TWEET_PLACEHOLDERS="00, n/a"))
        assert config.delivery.formatter.full_tweet_placeholders == frozenset({"00", "n/a"})

    def test_tag_and_chart_template(self) -> None:
        config = RelayConfig.from_env(
            make_env(DISCORD_TAG="<@&123>", CHART_URL_TEMPLATE="https://c.example/{symbol}")
        )
        assert config.delivery.formatter.tag == "<@&123>"
        assert config.delivery.formatter.chart_url_template == "https://c.example/{symbol}"


class TestTranslationConfig:
    """Translation settings."""

    def test_enabled_with_key_list(self) -> None:
        config = RelayConfig.from_env(
            make_env(TRANSLATE_TARGET_LANGUAGE="Korean", TRANSLATION_API_KEYS="k1, k2,k3")
        )
        assert config.translation.enabled is True
        assert config.translation.credentials == ["k1", "k2", "k3"]

    def test_falls_back_to_single_key(self) -> None:
        config = RelayConfig.from_env(
            make_env(TRANSLATE_TARGET_LANGUAGE="Korean", ANTHROPIC_API_KEY="solo")
        )
        assert config.translation.credentials == ["solo"]

    def test_enabled_without_keys_rejected(self) -> None:
        with pytest.raises(ValueError, match="credentials"):
            RelayConfig.from_env(make_env(TRANSLATE_TARGET_LANGUAGE="Korean"))

    def test_tuning_values(self) -> None:
        config = RelayConfig.from_env(
            make_env(
                TRANSLATE_TARGET_LANGUAGE="Japanese",
                TRANSLATION_API_KEYS="k1",
                TRANSLATION_BATCH_SIZE="5",
                TRANSLATION_BATCH_DELAY_MS="0",
                TRANSLATION_RETRY_MULTIPLIER="2",
                TRANSLATION_MODEL="claude-other",
            )
        )
        assert config.translation.batch_size == 5
        assert config.translation.batch_delay_ms == 0
        assert config.translation.retry_multiplier == 2
        assert config.translation.model == "claude-other"

    def test_keys_not_in_repr(self) -> None:
        config = RelayConfig.from_env(
            make_env(TRANSLATE_TARGET_LANGUAGE="Korean", TRANSLATION_API_KEYS="sk-very-secret")
        )
        assert "sk-very-secret" not in repr(config)
