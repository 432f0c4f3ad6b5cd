"""Operational checks for the lucky-draw service configuration and credentials.

Commands:

``check``
    Instantiate ``AppSettings`` from the given ``.env`` file. Missing Cafe24
    credentials fail here instead of at the first customer lookup.
``record`` / ``verify``
    Store, then later compare, a SHA256 checksum of the ``.env`` file so
    unexpected edits are detected before a restart.
``credentials``
    Report whether the Cafe24 credential record exists in the configured
    store and when it was last updated. Token values are never printed.
``seed``
    Write an access/refresh token pair obtained from the Cafe24 developer
    console into the credential record (initial install or re-authorization).

Example usages::

    python -m scripts.check_env record --env-file /opt/luckydraw/.env \
        --hash-file /opt/luckydraw/.env.sha256

    python -m scripts.check_env seed --env-file /opt/luckydraw/.env \
        --access-token "$ACCESS" --refresh-token "$REFRESH"
"""

from __future__ import annotations

import argparse
import asyncio
import hashlib
import sys
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from luckydraw.clients import DynamoDBClient, SQLiteStore
from luckydraw.core.config import AppSettings, _load_env_file
from luckydraw.services import CredentialStore, TokenCipherService

EXIT_OK = 0
EXIT_MISSING_CREDENTIALS = 1
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


def _compute_hash(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _validate_settings(env_file: Path) -> AppSettings:
    """Load the env file and build the settings, raising on invalid values."""
    _load_env_file(str(env_file))
    return AppSettings()  # type: ignore[call-arg]


def _build_credential_store(settings: AppSettings) -> CredentialStore:
    if settings.store.backend == "dynamodb":
        store = DynamoDBClient(settings.store)
    else:
        store = SQLiteStore(settings.store.sqlite_db_path)
    secret = settings.security.token_encryption_secret or settings.cafe24.client_secret
    return CredentialStore(
        store=store,
        cipher=TokenCipherService(secret=secret),
        record_key=settings.store.credential_record_key,
    )


def _record_checksum(env_file: Path, hash_file: Path) -> int:
    checksum = _compute_hash(env_file)
    hash_file.write_text(f"{checksum}\n", encoding="utf-8")
    print(f"Recorded checksum to {hash_file} ({checksum})")
    return EXIT_OK


def _verify_checksum(env_file: Path, hash_file: Path) -> int:
    if not hash_file.exists():
        print(
            f"Expected checksum file {hash_file} is missing. "
            "Re-run with the 'record' command to establish a baseline.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _compute_hash(env_file)
    if expected == actual:
        print("Environment checksum OK.")
        return EXIT_OK

    print(
        "Environment checksum mismatch!\n"
        f"  expected: {expected}\n"
        f"  actual:   {actual}\n"
        "Investigate recent changes before restarting services.",
        file=sys.stderr,
    )
    return EXIT_CHECKSUM_ERROR


def _report_credentials(settings: AppSettings) -> int:
    credential_store = _build_credential_store(settings)
    stored = asyncio.run(credential_store.find_one())
    if stored is None:
        print(
            f"No credential record '{credential_store.record_key}' found. "
            "Seed it with the 'seed' command.",
            file=sys.stderr,
        )
        return EXIT_MISSING_CREDENTIALS
    print(
        f"Credential record '{stored.name}' present "
        f"(updated {stored.updated_at.isoformat()})."
    )
    return EXIT_OK


def _seed_credentials(settings: AppSettings, access_token: str, refresh_token: str) -> int:
    credential_store = _build_credential_store(settings)
    stored = asyncio.run(credential_store.upsert(access_token, refresh_token))
    print(f"Stored credential record '{stored.name}'.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate settings, detect .env drift and manage Cafe24 credentials."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common_arguments(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the repo root).",
        )

    for name, help_text in (
        ("record", "Validate settings and store the checksum baseline."),
        ("verify", "Validate settings and compare the checksum with the baseline."),
    ):
        checksum_parser = subparsers.add_parser(name, help=help_text)
        add_common_arguments(checksum_parser)
        checksum_parser.add_argument(
            "--hash-file",
            required=True,
            type=Path,
            help="Location of the checksum baseline.",
        )

    check_parser = subparsers.add_parser(
        "check", help="Validate settings without touching any checksum files."
    )
    add_common_arguments(check_parser)

    credentials_parser = subparsers.add_parser(
        "credentials", help="Report whether the Cafe24 credential record exists."
    )
    add_common_arguments(credentials_parser)

    seed_parser = subparsers.add_parser(
        "seed", help="Write a Cafe24 token pair into the credential record."
    )
    add_common_arguments(seed_parser)
    seed_parser.add_argument("--access-token", required=True)
    seed_parser.add_argument("--refresh-token", required=True)

    return parser


def _ensure_env_file(env_file: Path) -> None:
    if not env_file.exists():
        raise FileNotFoundError(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool."
        )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file: Path = args.env_file

    try:
        _ensure_env_file(env_file)
        settings = _validate_settings(env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2, include_input=False)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    command: str = args.command
    handlers: dict[str, Callable[[], int]] = {
        "record": lambda: _record_checksum(env_file, args.hash_file),
        "verify": lambda: _verify_checksum(env_file, args.hash_file),
        "check": lambda: EXIT_OK,
        "credentials": lambda: _report_credentials(settings),
        "seed": lambda: _seed_credentials(
            settings, args.access_token, args.refresh_token
        ),
    }
    try:
        return handlers[command]()
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Unexpected error while running '{command}': {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
