"""
Tests for HarnessEnv defaults and environment loading.
"""

import pytest
from pydantic import ValidationError

from finality_harness.env import HarnessEnv, TimeParser, load_env


class TestHarnessEnv:
    def test_defaults(self) -> None:
        env = HarnessEnv()

        assert env.get_eventually_config() == {'timeout': 300.0, 'poll_interval': 0.5}
        assert env.get_construction_config() == {'timeout': 5.0, 'poll_interval': 0.5}
        assert env.get_port_range() == (20000, 30000)
        assert env.HARNESS_CHAIN_ID == "chain-test"
        assert env.HARNESS_MONIKER == "test-moniker"
        assert env.HARNESS_KEY_PASSPHRASE == "testpass"
        assert env.HARNESS_KEY_HD_PATH == ""
        assert env.HARNESS_FUNDING_AMOUNT == "1000000ubbn"
        assert env.HARNESS_COVENANT_QUORUM == 2

    def test_strict_types(self) -> None:
        with pytest.raises(ValidationError):
            HarnessEnv(HARNESS_COVENANT_QUORUM="2")

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            HarnessEnv(HARNESS_LOG_LEVEL="verbose")

    def test_time_parser(self) -> None:
        parser = TimeParser()

        assert parser.parse("5m") == 300.0
        assert parser.parse("0.5s") == 0.5
        assert parser.parse("1m30s") == 90.0

    def test_time_parser_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            TimeParser().parse("soon")


class TestLoadEnv:
    def test_reads_process_environment(self, monkeypatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HARNESS_CHAIN_ID", "chain-custom")
        monkeypatch.setenv("HARNESS_COVENANT_COMMITTEE_SIZE", "5")

        env = load_env()

        assert env.HARNESS_CHAIN_ID == "chain-custom"
        assert env.HARNESS_COVENANT_COMMITTEE_SIZE == 5

    def test_env_file_overrides_process_environment(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("HARNESS_MONIKER", "from-process")
        env_file = tmp_path / "harness.env"
        env_file.write_text(
            "HARNESS_MONIKER=from-file\nHARNESS_EVENTUALLY_TIMEOUT=10s\nUNRELATED=1\n"
        )

        env = load_env(env_file=str(env_file))

        assert env.HARNESS_MONIKER == "from-file"
        assert env.get_eventually_config()['timeout'] == 10.0

    def test_override_wins(self, monkeypatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HARNESS_CHAIN_ID", "chain-custom")

        env = load_env(override=HarnessEnv(HARNESS_CHAIN_ID="chain-override"))

        assert env.HARNESS_CHAIN_ID == "chain-override"
