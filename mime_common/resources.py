"""Resource container format: keyed, typed metadata blocks attached to a file."""

import base64
import binascii
import json
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from mime_common.exceptions import ResourceError
from mime_common.logging_config import get_logger
from mime_common.types import AttributeDescriptor, AttributeType

logger = get_logger(__name__)

CONTAINER_FORMAT = "mime-resources"
CONTAINER_VERSION = 1

# Trailer of a container appended to another file: <u64 little-endian length><magic>
ATTACHED_MAGIC = b"MIMERSRC"
TRAILER = struct.Struct("<Q")
TRAILER_SIZE = TRAILER.size + len(ATTACHED_MAGIC)

STRING_TYPE = "CSTR"
MESSAGE_TYPE = "MSGG"
VECTOR_ICON_TYPE = "VICN"
SHORT_DESC_TYPE = "MSDC"
LONG_DESC_TYPE = "MLDC"
SIGNATURE_TYPE = "MSIG"


@dataclass(frozen=True)
class ResourceKey:
    type_code: str
    name: str


META_TYPE = ResourceKey(STRING_TYPE, "META:TYPE")
META_SHORT_DESC = ResourceKey(SHORT_DESC_TYPE, "META:S:DESC")
META_LONG_DESC = ResourceKey(LONG_DESC_TYPE, "META:L:DESC")
META_PREF_APP = ResourceKey(SIGNATURE_TYPE, "META:PREF_APP")
META_SNIFF_RULE = ResourceKey(STRING_TYPE, "META:SNIFF_RULE")
META_EXTENSIONS = ResourceKey(MESSAGE_TYPE, "META:EXTENS")
META_ATTR_INFO = ResourceKey(MESSAGE_TYPE, "META:ATTR_INFO")
META_ICON = ResourceKey(VECTOR_ICON_TYPE, "META:ICON")


@dataclass(frozen=True)
class ResourceEntry:
    """One resource block."""
    type_code: str
    name: str
    data: bytes
    id: int = 0

    @property
    def size(self) -> int:
        return len(self.data)

    def to_dict(self) -> dict:
        return {
            'type': self.type_code,
            'id': self.id,
            'name': self.name,
            'size': self.size,
            'data': base64.b64encode(self.data).decode('ascii'),
        }

    @classmethod
    def from_dict(cls, obj: dict) -> 'ResourceEntry':
        """
        Build an entry from its serialized form.

        The declared size wins over the payload length; a payload shorter
        than its declared size is a corrupt container.
        """
        type_code = obj['type']
        if not isinstance(type_code, str) or len(type_code) != 4:
            raise ValueError(f"invalid type code {type_code!r}")
        data = base64.b64decode(obj.get('data', ''), validate=True)
        size = obj.get('size', len(data))
        if not isinstance(size, int) or size < 0 or size > len(data):
            raise ValueError(f"declared size {size!r} does not match payload of {len(data)} bytes")
        return cls(type_code=type_code, name=str(obj['name']), data=data[:size], id=int(obj.get('id', 0)))


def encode_container(entries: Iterable[ResourceEntry]) -> bytes:
    """Serialize resource entries to container bytes."""
    return json.dumps({
        'format': CONTAINER_FORMAT,
        'version': CONTAINER_VERSION,
        'resources': [entry.to_dict() for entry in entries],
    }, indent=2).encode('utf-8')


def decode_container(raw: bytes) -> list[ResourceEntry]:
    """
    Parse container bytes, standalone or attached to another file.

    Raises:
        ResourceError: If the bytes are not a valid container
    """
    if raw.endswith(ATTACHED_MAGIC) and len(raw) >= TRAILER_SIZE:
        (length,) = TRAILER.unpack_from(raw, len(raw) - TRAILER_SIZE)
        start = len(raw) - TRAILER_SIZE - length
        if start < 0:
            raise ResourceError(f"attached resource length {length} exceeds file size")
        raw = raw[start:len(raw) - TRAILER_SIZE]

    try:
        obj = json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ResourceError(f"not a resource container: {e}") from e

    if not isinstance(obj, dict) or obj.get('format') != CONTAINER_FORMAT:
        raise ResourceError("not a resource container: missing format marker")
    if obj.get('version') != CONTAINER_VERSION:
        raise ResourceError(f"unsupported resource container version {obj.get('version')!r}")

    resources = obj.get('resources', [])
    if not isinstance(resources, list):
        raise ResourceError("not a resource container: resources must be a list")

    entries = []
    for index, item in enumerate(resources):
        try:
            entries.append(ResourceEntry.from_dict(item))
        except (KeyError, TypeError, ValueError, binascii.Error) as e:
            raise ResourceError(f"corrupt resource #{index}: {e}") from e
    return entries


def write_resources(path: Union[str, Path], entries: Iterable[ResourceEntry]) -> None:
    """Write a standalone resource container file."""
    Path(path).write_bytes(encode_container(entries))


def attach_resources(path: Union[str, Path], entries: Iterable[ResourceEntry]) -> None:
    """Append a resource container to an existing file."""
    payload = encode_container(entries)
    with open(path, 'ab') as f:
        f.write(payload)
        f.write(TRAILER.pack(len(payload)))
        f.write(ATTACHED_MAGIC)


def string_resource(key: ResourceKey, value: str, id: int = 0) -> ResourceEntry:
    """Build a NUL-terminated string resource."""
    return ResourceEntry(key.type_code, key.name, value.encode('utf-8') + b'\x00', id)


def message_resource(key: ResourceKey, message: dict, id: int = 0) -> ResourceEntry:
    """Build a flattened message resource."""
    return ResourceEntry(key.type_code, key.name, json.dumps(message).encode('utf-8'), id)


class ResourceSource:
    """
    Read-only keyed access to the resource blocks of a file.

    Use as a context manager; blocks are released on exit.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = str(path)
        self._entries: Optional[dict[tuple[str, str], ResourceEntry]] = None

    def open(self) -> 'ResourceSource':
        """
        Load the container.

        Raises:
            ResourceError: If the file is unreadable or not a valid container
        """
        try:
            raw = Path(self.path).read_bytes()
        except OSError as e:
            raise ResourceError(f"error reading resources from {self.path}: {e.strerror or e}") from e

        entries = decode_container(raw)
        self._entries = {(entry.type_code, entry.name): entry for entry in entries}
        logger.debug(f"Loaded {len(entries)} resources from {self.path}")
        return self

    def close(self) -> None:
        self._entries = None

    def __enter__(self) -> 'ResourceSource':
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def load(self, key: ResourceKey) -> Optional[bytes]:
        """Return the raw block for key, or None when absent."""
        if self._entries is None:
            raise ResourceError(f"resource source {self.path} is not open")
        entry = self._entries.get((key.type_code, key.name))
        return entry.data if entry is not None else None

    def load_string(self, key: ResourceKey) -> Optional[str]:
        data = self.load(key)
        if data is None:
            return None
        try:
            return data.split(b'\x00', 1)[0].decode('utf-8')
        except UnicodeDecodeError as e:
            raise ResourceError(f"resource {key.name} in {self.path} is not valid UTF-8") from e

    def load_message(self, key: ResourceKey) -> Optional[dict]:
        """Return a flattened message block; an undecodable message counts as absent."""
        data = self.load(key)
        if data is None:
            return None
        try:
            message = json.loads(data.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning(f"Ignoring unreadable message resource {key.name} in {self.path}")
            return None
        if not isinstance(message, dict):
            logger.warning(f"Ignoring message resource {key.name} in {self.path}: not a message")
            return None
        return message

    def load_extensions(self) -> Optional[list[str]]:
        message = self.load_message(META_EXTENSIONS)
        if message is None:
            return None
        extensions = message.get('extensions')
        if not isinstance(extensions, list):
            logger.warning(f"Ignoring {META_EXTENSIONS.name} in {self.path}: no extensions list")
            return None
        return [str(ext).lstrip('.') for ext in extensions]

    def load_attributes(self) -> Optional[list[AttributeDescriptor]]:
        message = self.load_message(META_ATTR_INFO)
        if message is None:
            return None
        items = message.get('attributes')
        if not isinstance(items, list):
            logger.warning(f"Ignoring {META_ATTR_INFO.name} in {self.path}: no attributes list")
            return None
        try:
            return [_parse_attribute(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            raise ResourceError(f"invalid attribute info in {self.path}: {e}") from e

    def load_icon(self) -> Optional[bytes]:
        data = self.load(META_ICON)
        return data if data else None


def _optional_bool(item: dict, name: str) -> Optional[bool]:
    value = item.get(name)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a boolean, got {value!r}")
    return value


def _parse_attribute(item: dict) -> AttributeDescriptor:
    name = item['name']
    if not isinstance(name, str) or not name:
        raise ValueError(f"attribute name must be a non-empty string, got {name!r}")
    return AttributeDescriptor(
        name=name,
        public_name=str(item.get('public_name') or name),
        type=AttributeType.parse(str(item.get('type', 'string'))),
        searchable=_optional_bool(item, 'searchable'),
        viewable=_optional_bool(item, 'viewable'),
        editable=_optional_bool(item, 'editable'),
    )
