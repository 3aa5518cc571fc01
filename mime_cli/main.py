"""CLI entry point."""

import os
import sys
from pathlib import Path
from typing import Optional

from mime_common.logging_config import setup_logging
from mime_cli.commands import close_clients, get_config, handle_delete, handle_install, handle_list
from mime_cli.constants import PROGRAM_NAME, USAGE_TEXT
from mime_cli.models import (
    CommandRequest,
    CommandResult,
    DeleteCommand,
    HelpCommand,
    InstallCommand,
    ListCommand,
)
from mime_cli.parser import ParseError, parse_command


def print_usage() -> None:
    prog = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else PROGRAM_NAME
    if prog in ('__main__.py', '-c', ''):
        prog = PROGRAM_NAME
    print(USAGE_TEXT.format(prog=prog))


def dispatch_command(cmd_obj: CommandRequest) -> CommandResult:
    """Dispatch parsed command to appropriate handler."""
    if isinstance(cmd_obj, InstallCommand):
        return handle_install(cmd_obj)
    elif isinstance(cmd_obj, DeleteCommand):
        return handle_delete(cmd_obj)
    elif isinstance(cmd_obj, ListCommand):
        return handle_list(cmd_obj)
    else:
        raise TypeError(f"Unsupported command: {cmd_obj!r}")


def main(argv: Optional[list[str]] = None) -> int:
    """Run one command and return the process exit code."""
    args = list(sys.argv[1:] if argv is None else argv)
    debug = '--debug' in args
    args = [arg for arg in args if arg != '--debug']

    try:
        cmd_obj = parse_command(args)
    except ParseError as e:
        if args:
            print(f"{PROGRAM_NAME}: {e}", file=sys.stderr)
        print_usage()
        return 1

    if isinstance(cmd_obj, HelpCommand):
        print_usage()
        return 0

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL') or get_config().get_log_level()
    logger = setup_logging('mime_cli', log_level=log_level)
    setup_logging('mime_common', log_level=log_level)
    logger.debug(f"Running {cmd_obj.command} command")

    try:
        result = dispatch_command(cmd_obj)
    finally:
        close_clients()

    for line in result.output:
        print(line)
    for line in result.errors:
        print(line, file=sys.stderr)
    return result.exit_code


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
