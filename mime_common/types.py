"""Shared data type definitions (TypeRecord, AttributeDescriptor, IndexOutcome)."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class AttributeType(str, Enum):
    """Value encoding of a file attribute."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    DOUBLE = "double"
    TIME = "time"
    BOOL = "bool"

    @property
    def type_code(self) -> str:
        """Four-character type code used by the filesystem."""
        return _TYPE_CODES[self]

    @classmethod
    def parse(cls, value: str) -> "AttributeType":
        """
        Parse an attribute type tag, accepting aliases and type codes.

        Raises:
            ValueError: If the tag is unknown
        """
        tag = value.strip()
        for member, code in _TYPE_CODES.items():
            if tag == code:
                return member
        tag = tag.lower()
        tag = _ALIASES.get(tag, tag)
        return cls(tag)


_TYPE_CODES = {
    AttributeType.STRING: "CSTR",
    AttributeType.INT32: "LONG",
    AttributeType.INT64: "LLNG",
    AttributeType.FLOAT: "FLOT",
    AttributeType.DOUBLE: "DBLE",
    AttributeType.TIME: "TIME",
    AttributeType.BOOL: "BOOL",
}

_ALIASES = {
    "integer": "int32",
    "int": "int32",
    "long": "int64",
    "str": "string",
    "boolean": "bool",
}


@dataclass(frozen=True)
class AttributeDescriptor:
    """
    One file attribute associated with a MIME type.

    `searchable` is tri-state: None means the index is left alone.
    """
    name: str
    public_name: str
    type: AttributeType
    searchable: Optional[bool] = None
    viewable: Optional[bool] = None
    editable: Optional[bool] = None


@dataclass
class TypeRecord:
    """
    A MIME type record as stored in the registry.

    Fields left as None were never set and must not be written.
    """
    identifier: str
    short_description: Optional[str] = None
    long_description: Optional[str] = None
    preferred_app: Optional[str] = None
    sniffer_rule: Optional[str] = None
    extensions: Optional[list[str]] = None
    attributes: Optional[list[AttributeDescriptor]] = None
    icon: Optional[bytes] = None

    @property
    def supertype(self) -> str:
        return self.identifier.split('/', 1)[0]

    def present_fields(self) -> dict:
        """Return the optional fields that carry a value, in setter order."""
        names = (
            'short_description',
            'long_description',
            'preferred_app',
            'sniffer_rule',
            'extensions',
            'attributes',
            'icon',
        )
        return {name: getattr(self, name) for name in names if getattr(self, name) is not None}


class IndexAction(str, Enum):
    CREATE = "create"
    REMOVE = "remove"


class IndexStatus(str, Enum):
    """Classified result of one index operation."""

    CREATED = "created"
    REMOVED = "removed"
    ALREADY_EXISTS = "already-exists"
    NOT_FOUND = "not-found"
    FAILED = "failed"

    @property
    def is_warning(self) -> bool:
        return self is IndexStatus.FAILED


@dataclass(frozen=True)
class IndexOutcome:
    """Result of synchronizing one attribute index."""
    attribute: str
    action: IndexAction
    status: IndexStatus
    detail: Optional[str] = None


@dataclass
class ImportReport:
    """Summary of a resource-driven import."""
    record: TypeRecord
    source_path: str
    newly_installed: bool
    fields_set: list[str] = field(default_factory=list)
    index_outcomes: list[IndexOutcome] = field(default_factory=list)

    @property
    def warnings(self) -> list[IndexOutcome]:
        return [outcome for outcome in self.index_outcomes if outcome.status.is_warning]
