"""Command parser for CLI arguments."""

from mime_cli.constants import COMMAND_ALIASES
from mime_cli.models import (
    CommandRequest,
    DeleteCommand,
    HelpCommand,
    InstallCommand,
    ListCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(args: list[str]) -> CommandRequest:
    """Parse command-line arguments into a CommandRequest object.

    Args:
        args: Arguments after the program name, global flags removed

    Returns:
        CommandRequest object (one of Install/Delete/List/Help)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not args:
        raise ParseError("No command given")

    command_name = COMMAND_ALIASES.get(args[0], args[0])

    if command_name == "install":
        return _parse_install(args[1:])
    elif command_name == "delete":
        return _parse_delete(args[1:])
    elif command_name == "list":
        return _parse_list(args[1:])
    elif command_name == "help":
        return HelpCommand()
    else:
        raise ParseError(f"unknown command {args[0]}")


def _parse_install(args: list[str]) -> InstallCommand:
    """Parse 'install <path-or-type>' command."""
    if len(args) != 1:
        raise ParseError("install requires exactly 1 argument: <path-or-mime-type>")
    return InstallCommand(target=args[0])


def _parse_delete(args: list[str]) -> DeleteCommand:
    """Parse 'delete <mime-type>' command."""
    if len(args) != 1:
        raise ParseError("delete requires exactly 1 argument: <mime-type>")
    return DeleteCommand(identifier=args[0])


def _parse_list(args: list[str]) -> ListCommand:
    """Parse 'list [supertype]' command."""
    if len(args) > 1:
        raise ParseError("list takes at most 1 argument: [supertype]")
    return ListCommand(supertype=args[0] if args else None)
