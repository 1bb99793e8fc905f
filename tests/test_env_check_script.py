"""Tests for the environment validation script."""

from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

from pathlib import Path

import pytest

from scripts import check_env

TRACKED_ENV_KEYS = [
    "GITHUB_CLIENT_ID",
    "GITHUB_CLIENT_SECRET",
    "PUBLIC_BASE_URL",
    "DEBUG_ENDPOINTS_ENABLED",
]


def _write_env(env_path: Path, **values: str) -> None:
    contents = "\n".join(f"{key}={value}" for key, value in values.items())
    env_path.write_text(contents + "\n", encoding="utf-8")


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch):
    def clear() -> None:
        for key in TRACKED_ENV_KEYS:
            monkeypatch.delenv(key, raising=False)

    # Values loaded from env files land in os.environ; register them for undo.
    for key in TRACKED_ENV_KEYS:
        monkeypatch.setenv(key, "placeholder")
    clear()
    return clear


@pytest.mark.parametrize("command", ["record", "verify", "check", "show"])
def test_missing_env_file(tmp_path: Path, command: str) -> None:
    argv = [command, "--env-file", str(tmp_path / ".missing-env")]
    if command in {"record", "verify"}:
        argv.extend(["--baseline", str(tmp_path / ".env.baseline.json")])

    assert check_env.main(argv) == check_env.EXIT_RUNTIME_ERROR


def test_record_then_verify_detects_edits(tmp_path: Path, clean_env) -> None:
    env_file = tmp_path / ".env"
    baseline = tmp_path / ".env.baseline.json"
    _write_env(env_file, GITHUB_CLIENT_ID="Iv1.abc", GITHUB_CLIENT_SECRET="secret")

    argv = ["--env-file", str(env_file), "--baseline", str(baseline)]
    assert check_env.main(["record", *argv]) == check_env.EXIT_OK
    assert baseline.read_text(encoding="utf-8").strip()

    clean_env()
    assert check_env.main(["verify", *argv]) == check_env.EXIT_OK

    _write_env(env_file, GITHUB_CLIENT_ID="Iv1.abc", GITHUB_CLIENT_SECRET="rotated")
    clean_env()
    assert check_env.main(["verify", *argv]) == check_env.EXIT_DRIFT_DETECTED


def test_missing_github_secret_fails_validation(tmp_path: Path, clean_env) -> None:
    env_file = tmp_path / ".env"
    _write_env(env_file, GITHUB_CLIENT_ID="Iv1.abc")

    exit_code = check_env.main(["check", "--env-file", str(env_file)])

    assert exit_code == check_env.EXIT_VALIDATION_ERROR


def test_show_masks_client_secret(
    tmp_path: Path, clean_env, capsys: pytest.CaptureFixture[str]
) -> None:
    env_file = tmp_path / ".env"
    _write_env(
        env_file,
        GITHUB_CLIENT_ID="Iv1.abc",
        GITHUB_CLIENT_SECRET="very-secret-github-value",
    )

    assert check_env.main(["show", "--env-file", str(env_file)]) == check_env.EXIT_OK

    output = capsys.readouterr().out
    assert "Iv1.abc" in output
    assert "very-secret-github-value" not in output
    assert "very***" in output


def test_verify_names_added_and_removed_keys(
    tmp_path: Path, clean_env, capsys: pytest.CaptureFixture[str]
) -> None:
    env_file = tmp_path / ".env"
    baseline = tmp_path / ".env.baseline.json"
    _write_env(
        env_file,
        GITHUB_CLIENT_ID="Iv1.abc",
        GITHUB_CLIENT_SECRET="s3cr3t-value",
        PUBLIC_BASE_URL="https://mcp.example.com",
    )
    argv = ["--env-file", str(env_file), "--baseline", str(baseline)]
    assert check_env.main(["record", *argv]) == check_env.EXIT_OK
    assert "s3cr3t-value" not in baseline.read_text(encoding="utf-8")

    _write_env(
        env_file,
        GITHUB_CLIENT_ID="Iv1.abc",
        GITHUB_CLIENT_SECRET="s3cr3t-value",
        DEBUG_ENDPOINTS_ENABLED="true",
    )
    clean_env()
    capsys.readouterr()

    assert check_env.main(["verify", *argv]) == check_env.EXIT_DRIFT_DETECTED
    err = capsys.readouterr().err
    assert "added keys:   DEBUG_ENDPOINTS_ENABLED" in err
    assert "removed keys: PUBLIC_BASE_URL" in err
