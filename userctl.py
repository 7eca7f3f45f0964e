#!/usr/bin/env python3
"""User management tool for a services XML-RPC endpoint."""

import argparse
import getpass
import logging
import sys

from common.config import ConnectionConfig
from common.errors import ConfigurationError
from common.protocol import DEFAULT_PORT, TRACE
from users.runner import ExitCode, run_command

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Manage users through a services XML-RPC endpoint. "
        "Connection settings default to the SERVICES_* environment variables."
    )
    parser.add_argument("--server", help="Endpoint path (e.g., services/xmlrpc)")
    parser.add_argument("--host", help="Host name of the website")
    parser.add_argument("--port", type=int, help=f"Port (default {DEFAULT_PORT})")
    parser.add_argument("--app-id", help="Application domain the API key is scoped to")
    parser.add_argument(
        "--secret", help="API key (prefer SERVICES_SECRET, arguments show up in ps)"
    )
    parser.add_argument("-u", "--username", help="Log in as this user before the operation")
    parser.add_argument("--timeout", type=float, help="Per-call timeout in seconds")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v debug, -vv trace")

    sub = parser.add_subparsers(dest="operation", required=True)

    get = sub.add_parser("get", help="Show a user")
    get.add_argument("uid", type=int)

    create = sub.add_parser("create", help="Create a user")
    create.add_argument("name")
    create.add_argument("mail")

    update = sub.add_parser("update", help="Replace name, password and mail of a user")
    update.add_argument("uid", type=int)
    update.add_argument("name")
    update.add_argument("mail")

    delete = sub.add_parser("delete", help="Delete a user")
    delete.add_argument("uid", type=int)

    return parser


def _load_config(args: argparse.Namespace) -> ConnectionConfig:
    return ConnectionConfig.from_env(
        server=args.server,
        host=args.host,
        port=args.port,
        secret=args.secret,
        app_id=args.app_id,
    )


def _operation_args(args: argparse.Namespace) -> tuple:
    match args.operation:
        case "get" | "delete":
            return (args.uid,)
        case "create":
            password = getpass.getpass(f"Password for new user {args.name}: ")
            return (args.name, password, args.mail)
        case "update":
            password = getpass.getpass(f"New password for user {args.uid}: ")
            return (args.uid, args.name, password, args.mail)
        case _:
            raise ValueError(f"Unknown operation: {args.operation}")


def main() -> int:
    args = build_parser().parse_args()

    level = {0: logging.INFO, 1: logging.DEBUG}.get(args.verbose, TRACE)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = _load_config(args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return ExitCode.INVALID_ARGUMENTS

    password = None
    if args.username:
        password = getpass.getpass(f"Password for {args.username}: ")

    return run_command(
        config,
        args.operation,
        _operation_args(args),
        username=args.username,
        password=password,
        timeout=args.timeout,
    )


if __name__ == "__main__":
    sys.exit(main())
