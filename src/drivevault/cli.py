"""Command line entry point: run the server or perform one-off setup tasks."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from drivevault.auth import DRIVE_SCOPES, OAuthClient
from drivevault.config import Settings
from drivevault.errors import DriveVaultError
from drivevault.identity import CallerIdentity
from drivevault.service import VaultService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="drivevault", description="Drive-backed per-user vault")
    parser.add_argument("--env-file", default=None, help="Path to a .env file (default: search from cwd)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=None, help="Overrides PORT")
    serve.add_argument("--debug", action="store_true", help="Run with the Flask debugger and reloader")

    oauth = sub.add_parser("setup-oauth", help="Run the consent flow and print refresh-token settings")
    oauth.add_argument("--client-secrets", required=True, help="OAuth client secrets JSON")

    init_user = sub.add_parser("init-user", help="Resolve (or create) a user's root folder")
    init_user.add_argument("uid")
    init_user.add_argument("--email", default=None)

    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _cmd_serve(args: argparse.Namespace) -> int:
    from drivevault.api import create_app

    settings = Settings.from_env(dotenv_path=args.env_file)
    _configure_logging(settings.log_level)
    app = create_app(settings)
    port = args.port if args.port is not None else settings.port
    logger.info("Serving drivevault on %s:%d", args.host, port)
    app.run(host=args.host, port=port, debug=args.debug)
    return 0


def _cmd_setup_oauth(args: argparse.Namespace) -> int:
    _configure_logging("INFO")
    creds = OAuthClient.run_consent_flow(args.client_secrets, DRIVE_SCOPES)
    print(f"GOOGLE_CLIENT_ID={creds.client_id}")
    print(f"GOOGLE_CLIENT_SECRET={creds.client_secret}")
    print(f"GOOGLE_REFRESH_TOKEN={creds.refresh_token}")
    return 0


def _cmd_init_user(args: argparse.Namespace) -> int:
    settings = Settings.from_env(dotenv_path=args.env_file)
    _configure_logging(settings.log_level)
    service = VaultService.from_settings(settings)
    record = service.initialize_user(CallerIdentity(uid=args.uid, email=args.email))
    print(record.folder_id)
    return 0


_COMMANDS = {
    "serve": _cmd_serve,
    "setup-oauth": _cmd_setup_oauth,
    "init-user": _cmd_init_user,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        return _COMMANDS[args.command](args)
    except DriveVaultError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
