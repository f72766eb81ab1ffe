# src/jwt_auth/cli.py

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Sequence

from .application.auth_service import AuthService
from .config.env import settings_from_env
from .domain.constants import TokenType
from .integrations.common.auth_factory import create_auth_service


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="jwt-auth",
        description="Issue, verify and refresh RS256 tokens "
                    "(keys and storage configured from JWT_AUTH_* env vars)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug output to stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a signed token.")
    create.add_argument(
        "--payload",
        "-p",
        default="{}",
        help="JSON object merged into the token claims.",
    )
    create.add_argument(
        "--type",
        "-t",
        choices=[t.name.lower() for t in TokenType],
        default="access",
        help="Token type (default: access).",
    )

    verify = sub.add_parser("verify", help="Verify a token and print its claims.")
    verify.add_argument("token")

    refresh = sub.add_parser(
        "refresh",
        help="Consume a refresh token and print its replacement. "
             "Replay tracking only spans invocations with JWT_AUTH_STORAGE=redis.",
    )
    refresh.add_argument("token")

    hash_ = sub.add_parser("hash", help="Print the replay-tracking hash of a token.")
    hash_.add_argument("token")

    return parser.parse_args(args=argv)


async def _run(args: argparse.Namespace) -> dict[str, Any]:
    service = await create_auth_service(settings_from_env())
    try:
        return await _dispatch(service, args)
    finally:
        await service.close()


async def _dispatch(service: AuthService, args: argparse.Namespace) -> dict[str, Any]:

    if args.command == "create":
        payload = json.loads(args.payload)
        if not isinstance(payload, dict):
            raise ValueError("--payload must be a JSON object")
        token = await service.create_token(payload, TokenType[args.type.upper()])
        return {"token": token}

    if args.command == "verify":
        claims = await service.verify_token(args.token)
        return {"claims": claims.to_payload()}

    if args.command == "refresh":
        result = await service.execute_refresh_token(args.token)
        return {"token": result.token, "claims": result.claims.to_payload()}

    return {"hash": service.get_token_hash(args.token)}


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        summary = asyncio.run(_run(args))
        json.dump({"ok": True, **summary}, sys.stdout, indent=2)
        sys.stdout.write("\n")
    except Exception as exc:  # noqa: BLE001
        json.dump({"ok": False, "error": str(exc), "type": type(exc).__name__}, sys.stdout, indent=2)
        sys.stdout.write("\n")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
