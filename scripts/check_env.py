"""Validate the proxy's environment configuration and detect ``.env`` drift.

Commands:

* ``check`` loads ``AppSettings`` from the env file and reports missing or
  malformed values (for example an absent ``GITHUB_CLIENT_SECRET``).
* ``show`` does the same and prints the effective configuration with every
  secret masked.
* ``record`` / ``verify`` store and compare a baseline of the env file (its
  SHA256 checksum and key names, never values) so unexpected edits are
  noticed before the proxy restarts. ``verify`` names added or removed keys.

Example usages::

    python -m scripts.check_env record --env-file /srv/mcp-oauth-proxy/.env \
        --baseline /srv/mcp-oauth-proxy/.env.baseline.json

    python -m scripts.check_env verify --env-file /srv/mcp-oauth-proxy/.env \
        --baseline /srv/mcp-oauth-proxy/.env.baseline.json
"""

from __future__ import annotations

import argparse
import hashlib
import json
import sys
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from mcp_oauth_proxy.core.config import AppSettings, _load_env_file
from mcp_oauth_proxy.core.logging import mask_secret

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_DRIFT_DETECTED = 3
EXIT_RUNTIME_ERROR = 5


def _load_settings(env_file: Path) -> AppSettings:
    """Build settings from ``env_file``; raises ``ValidationError`` when incomplete."""
    _load_env_file(str(env_file))
    return AppSettings()  # type: ignore[call-arg]


def _describe(settings: AppSettings) -> list[str]:
    storage = settings.storage
    return [
        f"environment:            {settings.environment}",
        f"public base URL:        {settings.public_base_url or '<from request>'}",
        f"GitHub client id:       {settings.github.client_id}",
        f"GitHub client secret:   {mask_secret(settings.github.client_secret, 4)}",
        f"GitHub redirect URI:    {settings.github.redirect_uri or '<base>/callback'}",
        f"upstream scope:         {settings.oauth.upstream_scope}",
        f"PKCE enforced:          {settings.oauth.enforce_pkce}",
        f"storage:                {storage.backend} ({storage.path})",
        "token encryption key:   "
        f"{'set' if settings.security.token_encryption_secret else 'GitHub client secret'}",
        f"debug endpoints:        {settings.debug_endpoints_enabled}",
    ]


def _show(settings: AppSettings) -> int:
    for line in _describe(settings):
        print(line)
    return EXIT_OK


def _env_keys(env_file: Path) -> list[str]:
    keys = set()
    for raw_line in env_file.read_text(encoding="utf-8").splitlines():
        name, sep, _ = raw_line.strip().partition("=")
        if sep and name and not name.startswith("#"):
            keys.add(name.strip())
    return sorted(keys)


def _fingerprint(env_file: Path) -> dict[str, object]:
    """Checksum plus key names; values never leave the env file."""
    return {
        "sha256": hashlib.sha256(env_file.read_bytes()).hexdigest(),
        "keys": _env_keys(env_file),
    }


def _record_baseline(env_file: Path, baseline_file: Path) -> int:
    fingerprint = _fingerprint(env_file)
    baseline_file.write_text(json.dumps(fingerprint, indent=2) + "\n", encoding="utf-8")
    print(f"Recorded baseline for {len(fingerprint['keys'])} keys to {baseline_file}")
    return EXIT_OK


def _verify_baseline(env_file: Path, baseline_file: Path) -> int:
    if not baseline_file.exists():
        print(f"No baseline at {baseline_file}; run 'record' first.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        baseline = json.loads(baseline_file.read_text(encoding="utf-8"))
    except ValueError:
        print(f"Baseline {baseline_file} is not valid JSON.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    current = _fingerprint(env_file)
    if baseline.get("sha256") == current["sha256"]:
        print("Environment matches the recorded baseline.")
        return EXIT_OK

    recorded_keys = set(baseline.get("keys", []))
    current_keys = set(current["keys"])
    added = sorted(current_keys - recorded_keys)
    removed = sorted(recorded_keys - current_keys)
    print("Environment drifted from the recorded baseline.", file=sys.stderr)
    if added:
        print(f"  added keys:   {', '.join(added)}", file=sys.stderr)
    if removed:
        print(f"  removed keys: {', '.join(removed)}", file=sys.stderr)
    if not added and not removed:
        print("  one or more values changed", file=sys.stderr)
    return EXIT_DRIFT_DETECTED


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate MCP OAuth proxy settings and detect .env drift."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("check", "Validate settings only."),
        ("show", "Validate settings and print them with secrets masked."),
        ("record", "Validate settings and store the baseline."),
        ("verify", "Validate settings and compare against the baseline."),
    ):
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env).",
        )
        if name in {"record", "verify"}:
            subparser.add_argument(
                "--baseline",
                required=True,
                type=Path,
                help="JSON file holding the recorded checksum and key names.",
            )

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        settings = _load_settings(env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Unexpected error during validation: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    handlers: dict[str, Callable[[], int]] = {
        "check": lambda: EXIT_OK,
        "show": lambda: _show(settings),
        "record": lambda: _record_baseline(env_file, args.baseline),
        "verify": lambda: _verify_baseline(env_file, args.baseline),
    }
    return handlers[args.command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
