"""Command request and result data types for CLI."""

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True)
class InstallCommand:
    """Install a MIME type from a resource file or by name."""

    target: str
    command: Literal["install"] = "install"


@dataclass(frozen=True)
class DeleteCommand:
    """Remove a MIME type from the registry."""

    identifier: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class ListCommand:
    """List installed MIME types."""

    supertype: str | None = None
    command: Literal["list"] = "list"


@dataclass(frozen=True)
class HelpCommand:
    """Print usage."""

    command: Literal["help"] = "help"


CommandRequest = InstallCommand | DeleteCommand | ListCommand | HelpCommand


@dataclass
class CommandResult:
    """Outcome of one command: output goes to stdout, errors to stderr."""

    success: bool
    output: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1
