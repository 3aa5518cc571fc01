"""HTTP clients for the MIME registry service and the filesystem index service."""

import base64
import uuid
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from mime_common.exceptions import (
    AlreadyInstalledError,
    NotInstalledError,
    RegistryError,
    RegistryTransportError,
)
from mime_common.logging_config import get_logger
from mime_common.types import AttributeDescriptor, AttributeType, IndexStatus, TypeRecord
from mime_cli.config import Config
from mime_cli.schemas import (
    AttributeInfoPayload,
    CreateIndexRequest,
    ErrorResponse,
    InstallTypeRequest,
    ListTypesResponse,
    TypeRecordResponse,
)

logger = get_logger(__name__)

SETTABLE_FIELDS = (
    'short_description',
    'long_description',
    'preferred_app',
    'sniffer_rule',
    'extensions',
    'attributes',
    'icon',
)


class ServiceClient:
    """Synchronous request/reply access to a registry-side HTTP service."""

    def __init__(self, config: Config, session: Optional[httpx.Client] = None):
        """
        Initialize service client.

        Args:
            config: Configuration instance
            session: Optional pre-built HTTP session (testing)
        """
        self.config = config
        self.session = session or httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        self.request_id = None

    def _request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        """
        Make one HTTP round trip. No retries.

        Raises:
            RegistryTransportError: On connection failure, timeout or server error
        """
        self.request_id = str(uuid.uuid4())
        headers = kwargs.pop('headers', {})
        headers['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        try:
            response = self.session.request(method, endpoint, headers=headers, **kwargs)
        except httpx.ConnectError as e:
            logger.debug(f"Connection failed: {method} {endpoint} error={e}")
            raise RegistryTransportError("Cannot connect to the MIME registry service. Is it running?") from e
        except httpx.TimeoutException as e:
            raise RegistryTransportError("Request to the MIME registry service timed out.") from e
        except httpx.HTTPError as e:
            raise RegistryTransportError(f"Transport error talking to the MIME registry service: {e}") from e

        logger.debug(
            f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
        )

        if response.status_code >= 500:
            error = self._error_body(response)
            raise RegistryTransportError(
                f"Registry service error: {error.detail}",
                code=error.code,
                status_code=response.status_code,
            )
        return response

    def _error_body(self, response: httpx.Response) -> ErrorResponse:
        try:
            return ErrorResponse.model_validate(response.json())
        except ValueError:
            return ErrorResponse(detail=response.text or f"HTTP {response.status_code}")

    def _unexpected(self, response: httpx.Response, action: str) -> RegistryError:
        error = self._error_body(response)
        logger.debug(f"Unexpected reply to {action}: status={response.status_code} code={error.code}")
        return RegistryError(
            f"{action} failed: {error.detail} (Code: {error.code})",
            code=error.code,
            status_code=response.status_code,
        )

    def _parse(self, model: type[BaseModel], response: httpx.Response) -> Any:
        try:
            return model.model_validate(response.json())
        except ValueError as e:
            raise RegistryTransportError(f"Malformed reply from registry service: {e}") from e

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class RegistryClient(ServiceClient):
    """Client for the MIME type registry."""

    @staticmethod
    def _type_path(identifier: str) -> str:
        return f"/types/{quote(identifier, safe='')}"

    def is_installed(self, identifier: str) -> bool:
        response = self._request('GET', self._type_path(identifier))
        if response.status_code == 200:
            return True
        if response.status_code == 404:
            return False
        raise self._unexpected(response, f"Lookup of {identifier}")

    def get(self, identifier: str) -> TypeRecord:
        """
        Fetch one installed type record.

        Raises:
            NotInstalledError: If the type is not in the registry
        """
        response = self._request('GET', self._type_path(identifier))
        if response.status_code == 404:
            raise NotInstalledError(f"MIME type {identifier} is not installed", code='NOT_FOUND', status_code=404)
        if response.status_code != 200:
            raise self._unexpected(response, f"Lookup of {identifier}")
        return record_from_payload(self._parse(TypeRecordResponse, response))

    def install(self, identifier: str) -> None:
        """
        Register a new, empty type record.

        Raises:
            AlreadyInstalledError: If the type already exists
            RegistryTransportError: If the service is unreachable or replies badly
        """
        logger.info(f"Installing MIME type {identifier}")
        response = self._request('POST', '/types', json=InstallTypeRequest(type=identifier).model_dump())
        if response.status_code in (200, 201):
            return
        if response.status_code == 409:
            raise AlreadyInstalledError(
                f"MIME type {identifier} is already installed", code='ALREADY_EXISTS', status_code=409
            )
        raise self._unexpected(response, f"Install of {identifier}")

    def delete(self, identifier: str) -> None:
        """
        Remove a type record.

        Raises:
            NotInstalledError: If the type is not in the registry
            RegistryTransportError: If the service is unreachable or replies badly
        """
        logger.info(f"Deleting MIME type {identifier}")
        response = self._request('DELETE', self._type_path(identifier))
        if response.status_code in (200, 204):
            return
        if response.status_code == 404:
            raise NotInstalledError(f"MIME type {identifier} is not installed", code='NOT_FOUND', status_code=404)
        raise self._unexpected(response, f"Delete of {identifier}")

    def list_installed(self, category: Optional[str] = None) -> list[TypeRecord]:
        """
        List installed type records, optionally restricted to one supertype.

        Order is whatever the service returns.
        """
        params = {'supertype': category} if category else {}
        response = self._request('GET', '/types', params=params)
        if response.status_code != 200:
            raise self._unexpected(response, f"Listing of {category or 'all'} types")
        listing = self._parse(ListTypesResponse, response)
        return [record_from_payload(item) for item in listing.types]

    def set_field(self, identifier: str, field: str, value: Any) -> None:
        """
        Set one field on an installed type record.

        Raises:
            NotInstalledError: If the type is not in the registry
        """
        if field not in SETTABLE_FIELDS:
            raise ValueError(f"unknown type record field {field!r}")
        logger.debug(f"Setting {field} on {identifier}")
        response = self._request('PATCH', self._type_path(identifier), json={field: encode_field(field, value)})
        if response.status_code in (200, 204):
            return
        if response.status_code == 404:
            raise NotInstalledError(f"MIME type {identifier} is not installed", code='NOT_FOUND', status_code=404)
        raise self._unexpected(response, f"Setting {field} on {identifier}")

    def set_short_description(self, identifier: str, description: str) -> None:
        self.set_field(identifier, 'short_description', description)

    def set_long_description(self, identifier: str, description: str) -> None:
        self.set_field(identifier, 'long_description', description)

    def set_preferred_app(self, identifier: str, signature: str) -> None:
        self.set_field(identifier, 'preferred_app', signature)

    def set_sniffer_rule(self, identifier: str, rule: str) -> None:
        self.set_field(identifier, 'sniffer_rule', rule)

    def set_extensions(self, identifier: str, extensions: list[str]) -> None:
        self.set_field(identifier, 'extensions', extensions)

    def set_attributes(self, identifier: str, attributes: list[AttributeDescriptor]) -> None:
        self.set_field(identifier, 'attributes', attributes)

    def set_icon(self, identifier: str, icon: bytes) -> None:
        self.set_field(identifier, 'icon', icon)


class IndexClient(ServiceClient):
    """Client for filesystem attribute indexes."""

    @staticmethod
    def _indices_path(volume: str) -> str:
        return f"/volumes/{quote(volume, safe='')}/indices"

    def create_index(self, volume: str, name: str, attr_type: AttributeType) -> IndexStatus:
        """
        Create an attribute index.

        Returns:
            IndexStatus.CREATED or IndexStatus.ALREADY_EXISTS

        Raises:
            RegistryError: For any other failure
        """
        payload = CreateIndexRequest(name=name, type=attr_type.value).model_dump()
        response = self._request('POST', self._indices_path(volume), json=payload)
        if response.status_code in (200, 201):
            return IndexStatus.CREATED
        if response.status_code == 409:
            return IndexStatus.ALREADY_EXISTS
        raise self._unexpected(response, f"Creating index {name} on {volume}")

    def remove_index(self, volume: str, name: str) -> IndexStatus:
        """
        Remove an attribute index.

        Returns:
            IndexStatus.REMOVED or IndexStatus.NOT_FOUND

        Raises:
            RegistryError: For any other failure
        """
        response = self._request('DELETE', f"{self._indices_path(volume)}/{quote(name, safe='')}")
        if response.status_code in (200, 204):
            return IndexStatus.REMOVED
        if response.status_code == 404:
            return IndexStatus.NOT_FOUND
        raise self._unexpected(response, f"Removing index {name} from {volume}")


def encode_field(field: str, value: Any) -> Any:
    """Convert a type record field to its JSON wire form."""
    if field == 'icon':
        return base64.b64encode(value).decode('ascii')
    if field == 'attributes':
        return [
            AttributeInfoPayload(
                name=attr.name,
                public_name=attr.public_name,
                type=attr.type.value,
                searchable=attr.searchable,
                viewable=attr.viewable,
                editable=attr.editable,
            ).model_dump(exclude_none=True)
            for attr in value
        ]
    if field == 'extensions':
        return list(value)
    return value


def record_from_payload(payload: TypeRecordResponse) -> TypeRecord:
    """
    Convert a wire type record to a TypeRecord.

    Raises:
        RegistryTransportError: If the payload carries undecodable values
    """
    try:
        attributes = None
        if payload.attributes is not None:
            attributes = [
                AttributeDescriptor(
                    name=attr.name,
                    public_name=attr.public_name,
                    type=AttributeType.parse(attr.type),
                    searchable=attr.searchable,
                    viewable=attr.viewable,
                    editable=attr.editable,
                )
                for attr in payload.attributes
            ]
        icon = base64.b64decode(payload.icon) if payload.icon is not None else None
    except ValueError as e:
        raise RegistryTransportError(f"Malformed type record for {payload.type}: {e}") from e

    return TypeRecord(
        identifier=payload.type,
        short_description=payload.short_description,
        long_description=payload.long_description,
        preferred_app=payload.preferred_app,
        sniffer_rule=payload.sniffer_rule,
        extensions=list(payload.extensions) if payload.extensions is not None else None,
        attributes=attributes,
        icon=icon,
    )
