"""Command line entry point: run RCON commands against a server."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace

from source_rcon.config import configure_logging, load_config_from_env
from source_rcon.rconclient import RCONClientMissingPassword, RCONError, RCONSession

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the command line client."""
    parser = argparse.ArgumentParser(
        prog="source-rcon",
        description="Run commands on a game server over Source RCON.",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="Path to the environment configuration file.",
    )
    parser.add_argument("--host", type=str, help="RCON server host.")
    parser.add_argument("--port", type=int, help="RCON server port.")
    parser.add_argument("--password", type=str, help="RCON password.")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Socket timeout in seconds.",
    )
    parser.add_argument(
        "--single-packet",
        action="store_true",
        help="Expect each response in a single packet.",
    )
    parser.add_argument(
        "commands",
        nargs="+",
        metavar="COMMAND",
        help="Commands to run, in order.",
    )
    return parser


def require_password(password: str | None) -> str:
    """Return the password, or raise if none was configured."""
    if password is None:
        msg = "No RCON password given, set RCON_PASSWORD or use --password"
        raise RCONClientMissingPassword(msg)
    return password


def main(argv: list[str] | None = None) -> int:
    """Connect, authenticate and print the output of each command.

    :param argv: Arguments to parse instead of ``sys.argv``
    :return: The process exit code
    """
    args = build_parser().parse_args(argv)

    overrides = {
        name: value
        for name, value in (
            ("host", args.host),
            ("port", args.port),
            ("password", args.password),
            ("timeout", args.timeout),
        )
        if value is not None
    }
    if args.single_packet:
        overrides["multi_packet"] = False

    try:
        config = replace(load_config_from_env(args.env_file), **overrides)
    except ValueError as e:
        LOGGER.error("Invalid configuration: %s", e)  # noqa: TRY400
        return EXIT_USAGE
    configure_logging(config)

    host, port = config.host, config.port
    timeout, multi = config.timeout, config.multi_packet

    try:
        password = require_password(config.password)
    except RCONClientMissingPassword as e:
        LOGGER.error("%s", e)  # noqa: TRY400
        return EXIT_USAGE

    try:
        with RCONSession.connect(host, port, timeout=timeout, multi=multi) as session:
            if not session.authenticate(password):
                LOGGER.error("Incorrect RCON password")
                return EXIT_FAILURE

            for command in args.commands:
                output = session.execute(command)
                print(output.decode("utf-8", errors="replace"))
    except (RCONError, OSError) as e:
        LOGGER.error("RCON request to %s:%d failed: %s", host, port, e)
        return EXIT_FAILURE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
