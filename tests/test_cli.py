"""
Tests for the secretsync CLI via CliRunner.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from secretsync.audit import read_audit_log
from secretsync.cli import main
from secretsync.errors import SecretWriteError
from secretsync.stores import DotenvVault


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, home: Path, *args: str, **kwargs):
    command = list(args[:2]) + ["--home", str(home)] + list(args[2:])
    return runner.invoke(main, command, **kwargs)


@pytest.fixture
def populated_home(tmp_home: Path, keyed_vault, local_vault) -> Path:
    """Vault with A, B, C; local vault already overriding A."""
    keyed_vault.seal("A", b"x")
    keyed_vault.seal("B", b"y")
    keyed_vault.seal("C", b"z")
    local_vault.seal("A", b"old")
    return tmp_home


class TestHelp:
    def test_version(self, runner: CliRunner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_decrypt_to_local_help(self, runner: CliRunner):
        result = runner.invoke(main, ["secrets", "decrypt-to-local", "--help"])
        assert result.exit_code == 0
        assert "--force" in result.output
        assert "--exit" in result.output


class TestDecryptToLocal:
    def test_skips_existing(self, runner: CliRunner, populated_home: Path, local_vault):
        result = _invoke(runner, populated_home, "secrets", "decrypt-to-local")

        assert result.exit_code == 0, result.output
        assert "3 secrets found in the vault." in result.output
        assert "already overridden" in result.output
        values = {
            k: v.value for k, v in local_vault.list_secrets().secrets.items()
        }
        assert values == {"A": b"old", "B": b"y", "C": b"z"}

    def test_force(self, runner: CliRunner, populated_home: Path, local_vault):
        result = _invoke(runner, populated_home, "secrets", "decrypt-to-local", "--force")

        assert result.exit_code == 0, result.output
        assert "already overridden" not in result.output
        assert local_vault.list_secrets().secrets["A"].value == b"x"

    def test_json_out(self, runner: CliRunner, populated_home: Path):
        result = _invoke(runner, populated_home, "secrets", "decrypt-to-local", "--json-out")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["total_found"] == 3
        assert data["skipped"] == ["A"]
        assert data["copied"] == ["B", "C"]
        assert data["failed"] == {}

    def test_read_errors_tolerated(self, runner: CliRunner, populated_home: Path, keyed_vault):
        (keyed_vault.directory / "B.enc").write_bytes(b"garbage")

        result = _invoke(runner, populated_home, "secrets", "decrypt-to-local")

        assert result.exit_code == 0
        assert "could not be decrypted" in result.output

    def test_read_errors_fail_with_exit(self, runner: CliRunner, populated_home: Path, keyed_vault):
        (keyed_vault.directory / "B.enc").write_bytes(b"garbage")

        result = _invoke(runner, populated_home, "secrets", "decrypt-to-local", "--exit")

        assert result.exit_code == 1

    def test_disabled_local_vault(self, runner: CliRunner, disabled_local_home: Path):
        result = _invoke(runner, disabled_local_home, "secrets", "decrypt-to-local")

        assert result.exit_code == 1
        assert "The local vault is disabled." in result.output

    def test_empty_vault(self, runner: CliRunner, tmp_home: Path):
        result = _invoke(runner, tmp_home, "secrets", "decrypt-to-local", "--exit")

        assert result.exit_code == 0
        assert "0 secrets found in the vault." in result.output

    def test_write_failure_reports_partial_copy(
        self, runner: CliRunner, tmp_home: Path, keyed_vault, local_vault, monkeypatch
    ):
        """Secrets written before a failed local write are audited and listed."""
        keyed_vault.seal("A", b"x")
        keyed_vault.seal("B", b"y")
        keyed_vault.seal("C", b"z")

        original_seal = DotenvVault.seal
        calls = []

        def flaky_seal(self, name, value):
            calls.append(name)
            if len(calls) == 2:
                raise SecretWriteError(f"disk full while storing {name}")
            return original_seal(self, name, value)

        monkeypatch.setattr(DotenvVault, "seal", flaky_seal)

        result = _invoke(runner, tmp_home, "secrets", "decrypt-to-local")

        assert result.exit_code == 1
        assert "disk full" in result.output
        assert 'Secret "A" was written' in result.output
        assert local_vault.list_secrets().names() == ["A"]

        entry = read_audit_log(tmp_home)[-1]
        assert entry.event_type == "SECRETS_DECRYPT_TO_LOCAL"
        assert entry.metadata["aborted"] is True
        assert entry.metadata["copied"] == ["A"]

    def test_audited(self, runner: CliRunner, populated_home: Path):
        _invoke(runner, populated_home, "secrets", "decrypt-to-local")

        entries = read_audit_log(populated_home)
        assert entries[-1].event_type == "SECRETS_DECRYPT_TO_LOCAL"
        assert entries[-1].metadata["skipped"] == ["A"]
        assert "x" not in json.dumps(entries[-1].metadata["copied"])


class TestSecretsCommands:
    def test_generate_keys(self, runner: CliRunner, tmp_home: Path):
        result = _invoke(runner, tmp_home, "secrets", "generate-keys")
        assert result.exit_code == 0
        assert (tmp_home / "vault" / "vault.key").exists()

        again = _invoke(runner, tmp_home, "secrets", "generate-keys")
        assert again.exit_code == 0
        assert "already exists" in again.output

    def test_set_and_list(self, runner: CliRunner, tmp_home: Path, keyed_vault):
        result = _invoke(runner, tmp_home, "secrets", "set", "API_KEY", "s3cr3t")
        assert result.exit_code == 0, result.output

        listed = _invoke(runner, tmp_home, "secrets", "list", "--reveal")
        assert listed.exit_code == 0
        assert "API_KEY" in listed.output
        assert "s3cr3t" in listed.output

    def test_list_hides_values(self, runner: CliRunner, populated_home: Path):
        result = _invoke(runner, populated_home, "secrets", "list")
        assert result.exit_code == 0
        assert "******" in result.output
        assert "--reveal" in result.output

    def test_set_from_stdin(self, runner: CliRunner, tmp_home: Path, keyed_vault):
        result = _invoke(runner, tmp_home, "secrets", "set", "PIPED", input="from-stdin\n")
        assert result.exit_code == 0, result.output
        assert keyed_vault.list_secrets().secrets["PIPED"].value == b"from-stdin"

    def test_set_local(self, runner: CliRunner, tmp_home: Path, local_vault):
        result = _invoke(runner, tmp_home, "secrets", "set", "LOCAL_ONLY", "v", "--local")
        assert result.exit_code == 0, result.output
        assert local_vault.list_secrets().names() == ["LOCAL_ONLY"]

    def test_set_without_key(self, runner: CliRunner, tmp_home: Path):
        result = _invoke(runner, tmp_home, "secrets", "set", "A", "1")
        assert result.exit_code == 1
        assert "generate-keys" in result.output

    def test_set_invalid_name(self, runner: CliRunner, tmp_home: Path, keyed_vault):
        result = _invoke(runner, tmp_home, "secrets", "set", "bad-name", "1")
        assert result.exit_code == 1
        assert "Invalid secret name" in result.output

    def test_set_local_disabled(self, runner: CliRunner, disabled_local_home: Path):
        result = _invoke(runner, disabled_local_home, "secrets", "set", "A", "1", "--local")
        assert result.exit_code == 1
        assert "disabled" in result.output

    def test_remove(self, runner: CliRunner, populated_home: Path, keyed_vault):
        result = _invoke(runner, populated_home, "secrets", "remove", "B")
        assert result.exit_code == 0
        assert keyed_vault.list_secrets().names() == ["A", "C"]

        missing = _invoke(runner, populated_home, "secrets", "remove", "B")
        assert missing.exit_code == 1
        assert "not found" in missing.output
