"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from mime_common.exceptions import (
    AlreadyInstalledError,
    InvalidTypeError,
    MimeError,
    NotInstalledError,
    RegistryError,
)
from mime_common.logging_config import get_logger
from mime_common.mime_type import validate_mime_type
from mime_common.types import IndexStatus
from mime_cli.config import Config, default_config_path
from mime_cli.constants import LIST_CATEGORIES
from mime_cli.importer import ResourceImporter
from mime_cli.models import CommandResult, DeleteCommand, InstallCommand, ListCommand
from mime_cli.registry_client import IndexClient, RegistryClient
from mime_cli.utils import format_import_report, format_index_outcome, format_type_list

logger = get_logger(__name__)


_config: Optional[Config] = None
_registry: Optional[RegistryClient] = None
_indexes: Optional[IndexClient] = None


def get_config() -> Config:
    """
    Get or create global Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config(default_config_path())
    return _config


def get_registry_client() -> RegistryClient:
    """
    Get or create global RegistryClient instance.

    Returns:
        RegistryClient instance
    """
    global _registry
    if _registry is None:
        logger.debug("Creating new RegistryClient instance")
        _registry = RegistryClient(get_config())
    return _registry


def get_index_client() -> IndexClient:
    """
    Get or create global IndexClient instance, sharing the registry session.

    Returns:
        IndexClient instance
    """
    global _indexes
    if _indexes is None:
        registry = get_registry_client()
        _indexes = IndexClient(get_config(), session=registry.session)
    return _indexes


def close_clients() -> None:
    """Close the shared HTTP session, if one was opened."""
    global _registry, _indexes
    if _registry is not None:
        _registry.close()
    _registry = None
    _indexes = None


def handle_install(
    cmd: InstallCommand,
    registry: Optional[RegistryClient] = None,
    indexes: Optional[IndexClient] = None,
    index_volume: Optional[str] = None,
) -> CommandResult:
    """
    Handle 'install' command.

    Anything that exists at the target path is imported from its
    resources, so a directory fails as an unreadable source. Only a
    target with nothing behind it is taken as a MIME type name and
    installed as an empty record.

    Args:
        cmd: InstallCommand with target path or type
        registry: Optional RegistryClient for dependency injection (testing)
        indexes: Optional IndexClient for dependency injection (testing)
        index_volume: Volume for attribute indexes (defaults to config)

    Returns:
        CommandResult with report or diagnostics
    """
    try:
        is_path = Path(cmd.target).exists()
    except OSError as e:
        return CommandResult(success=False, errors=[f"failed to install MIME type from {cmd.target}: {e}"])

    if registry is None:
        registry = get_registry_client()

    if is_path:
        if indexes is None:
            indexes = get_index_client()
        if index_volume is None:
            index_volume = get_config().get_index_volume()
        return _install_from_resources(cmd.target, registry, indexes, index_volume)

    return _install_by_name(cmd.target, registry)


def _install_from_resources(
    path: str,
    registry: RegistryClient,
    indexes: IndexClient,
    index_volume: str,
) -> CommandResult:
    logger.info(f"Executing install command: resources from {path}")
    importer = ResourceImporter(registry, indexes, index_volume)
    try:
        report = importer.run(path)
    except MimeError as e:
        logger.debug(f"Import from {path} failed", exc_info=True)
        return CommandResult(success=False, errors=[f"failed to install MIME type from {path}: {e}"])

    result = CommandResult(success=True, output=[format_import_report(report)])
    for outcome in report.index_outcomes:
        line = format_index_outcome(outcome, index_volume)
        if outcome.status is IndexStatus.FAILED:
            result.errors.append(line)
        else:
            result.output.append(line)
    return result


def _install_by_name(identifier: str, registry: RegistryClient) -> CommandResult:
    try:
        identifier = validate_mime_type(identifier)
    except InvalidTypeError as e:
        return CommandResult(
            success=False,
            errors=[f"failed to install MIME type {identifier}: no such file, and {e}"],
        )

    logger.info(f"Executing install command: {identifier}")
    try:
        if registry.is_installed(identifier):
            return CommandResult(success=True, output=[f"MIME type {identifier} is already installed."])
        registry.install(identifier)
    except AlreadyInstalledError:
        return CommandResult(success=True, output=[f"MIME type {identifier} is already installed."])
    except RegistryError as e:
        return CommandResult(success=False, errors=[f"failed to install MIME type {identifier}: {e}"])

    return CommandResult(success=True, output=[f"successfully installed MIME type {identifier}."])


def handle_delete(cmd: DeleteCommand, registry: Optional[RegistryClient] = None) -> CommandResult:
    """
    Handle 'delete' command.

    Deleting a type that is not installed is a skip, not an error.

    Args:
        cmd: DeleteCommand with MIME type
        registry: Optional RegistryClient for dependency injection (testing)

    Returns:
        CommandResult with outcome
    """
    try:
        identifier = validate_mime_type(cmd.identifier)
    except InvalidTypeError as e:
        return CommandResult(success=False, errors=[f"failed to delete MIME type {cmd.identifier}: {e}"])

    logger.info(f"Executing delete command: {identifier}")
    if registry is None:
        registry = get_registry_client()

    skipped = CommandResult(success=True, output=[f"MIME type {identifier} is not installed, skipping."])
    try:
        if not registry.is_installed(identifier):
            return skipped
        registry.delete(identifier)
    except NotInstalledError:
        return skipped
    except RegistryError as e:
        return CommandResult(success=False, errors=[f"failed to delete MIME type {identifier}: {e}"])

    return CommandResult(success=True, output=[f"successfully removed MIME type {identifier}."])


def handle_list(cmd: ListCommand, registry: Optional[RegistryClient] = None) -> CommandResult:
    """
    Handle 'list' command.

    Each category is queried independently; a failed query is reported
    and makes the command fail, but does not stop the remaining ones.

    Args:
        cmd: ListCommand with optional supertype
        registry: Optional RegistryClient for dependency injection (testing)

    Returns:
        CommandResult with formatted listings
    """
    if registry is None:
        registry = get_registry_client()

    categories = (cmd.supertype,) if cmd.supertype else LIST_CATEGORIES
    result = CommandResult(success=True)
    for category in categories:
        logger.info(f"Executing list command: supertype={category}")
        try:
            records = registry.list_installed(category)
        except RegistryError as e:
            result.success = False
            result.errors.append(f"failed to query MIME type DB for {category} types: {e}")
            continue
        result.output.append(format_type_list(category, records))
    return result
