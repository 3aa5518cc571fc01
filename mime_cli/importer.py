"""Resource-driven import of MIME type metadata into the registry."""

from pathlib import Path
from typing import Iterable, Union

from mime_common.exceptions import AlreadyInstalledError, MissingFieldError, RegistryError
from mime_common.logging_config import get_logger
from mime_common.mime_type import validate_mime_type
from mime_common.resources import (
    META_LONG_DESC,
    META_PREF_APP,
    META_SHORT_DESC,
    META_SNIFF_RULE,
    META_TYPE,
    ResourceSource,
)
from mime_common.types import (
    AttributeDescriptor,
    ImportReport,
    IndexAction,
    IndexOutcome,
    IndexStatus,
    TypeRecord,
)
from mime_cli.registry_client import IndexClient, RegistryClient

logger = get_logger(__name__)


def read_identifier(source: ResourceSource) -> str:
    """
    Read and validate META:TYPE from an open resource source.

    Raises:
        MissingFieldError: If META:TYPE is absent
        InvalidTypeError: If META:TYPE is not a valid MIME type
    """
    identifier = source.load_string(META_TYPE)
    if identifier is None:
        raise MissingFieldError(META_TYPE.name, source.path)
    return validate_mime_type(identifier)


def read_type_record(source: ResourceSource, identifier: str) -> TypeRecord:
    """
    Build a TypeRecord from the remaining fields of an open resource source.

    Absent optional fields stay None.

    Raises:
        MissingFieldError: If META:S:DESC is absent
    """
    short_description = source.load_string(META_SHORT_DESC)
    if short_description is None:
        raise MissingFieldError(META_SHORT_DESC.name, source.path)

    return TypeRecord(
        identifier=identifier,
        short_description=short_description,
        long_description=source.load_string(META_LONG_DESC),
        preferred_app=source.load_string(META_PREF_APP),
        sniffer_rule=source.load_string(META_SNIFF_RULE),
        extensions=source.load_extensions(),
        attributes=source.load_attributes(),
        icon=source.load_icon(),
    )


class ResourceImporter:
    """Installs or updates a MIME type from the resources attached to a file."""

    def __init__(self, registry: RegistryClient, indexes: IndexClient, index_volume: str):
        self.registry = registry
        self.indexes = indexes
        self.index_volume = index_volume

    def run(self, path: Union[str, Path]) -> ImportReport:
        """
        Import the type described by the resources of path.

        The type is installed as soon as its identifier validates, since
        every setter acts on an installed record. Index synchronization
        failures end up in the report, never raised.

        Raises:
            ResourceError: If the source is unreadable or lacks mandatory fields
            InvalidTypeError: If the declared type is malformed
            RegistryError: If installing or updating the record fails
        """
        with ResourceSource(path) as source:
            identifier = read_identifier(source)
            newly_installed = self._ensure_installed(identifier)
            record = read_type_record(source, identifier)

        report = ImportReport(record=record, source_path=str(path), newly_installed=newly_installed)

        for field, value in record.present_fields().items():
            self.registry.set_field(identifier, field, value)
            report.fields_set.append(field)

        if record.attributes:
            report.index_outcomes = self.sync_indexes(record.attributes)

        return report

    def _ensure_installed(self, identifier: str) -> bool:
        """Install identifier unless present; returns True when newly installed."""
        if self.registry.is_installed(identifier):
            logger.info(f"MIME type {identifier} is already installed, updating")
            return False
        try:
            self.registry.install(identifier)
        except AlreadyInstalledError:
            logger.info(f"MIME type {identifier} was installed concurrently, updating")
            return False
        return True


    def sync_indexes(self, attributes: Iterable[AttributeDescriptor]) -> list[IndexOutcome]:
        """
        Bring volume indexes in line with each attribute's searchable flag.

        Attributes without a searchable flag are left alone.
        """
        outcomes = []
        for attr in attributes:
            if attr.searchable is None:
                continue
            action = IndexAction.CREATE if attr.searchable else IndexAction.REMOVE
            try:
                if attr.searchable:
                    status = self.indexes.create_index(self.index_volume, attr.name, attr.type)
                else:
                    status = self.indexes.remove_index(self.index_volume, attr.name)
                outcome = IndexOutcome(attr.name, action, status)
            except RegistryError as e:
                outcome = IndexOutcome(attr.name, action, IndexStatus.FAILED, str(e))

            if outcome.status is IndexStatus.FAILED:
                logger.warning(f"Index {action.value} for {attr.name} on {self.index_volume} failed: {outcome.detail}")
            else:
                logger.info(f"Index {action.value} for {attr.name} on {self.index_volume}: {outcome.status.value}")
            outcomes.append(outcome)
        return outcomes
