"""Shared pytest fixtures for all tests."""

import copy
import json

import httpx
import pytest

from mime_cli.config import Config
from mime_cli.registry_client import IndexClient, RegistryClient
from mime_common.resources import (
    META_ATTR_INFO,
    META_EXTENSIONS,
    META_ICON,
    META_LONG_DESC,
    META_PREF_APP,
    META_SHORT_DESC,
    META_SNIFF_RULE,
    META_TYPE,
    ResourceEntry,
    attach_resources,
    message_resource,
    string_resource,
    write_resources,
)


class FakeRegistry:
    """In-memory stand-in for the registry and index services."""

    def __init__(self):
        self.types = {}
        self.indexes = {}
        self.calls = []
        self.fail_categories = set()
        self.fail_indexes = set()
        self.fail_install = False

    def snapshot(self):
        return copy.deepcopy(self.types), copy.deepcopy(self.indexes)

    def registry_calls(self):
        return [call for call in self.calls if call[1].startswith('/types')]

    def _error(self, status, code, detail):
        return httpx.Response(status, json={'detail': detail, 'code': code})

    def __call__(self, request):
        method = request.method
        path = request.url.path
        self.calls.append((method, path))

        if path == '/types':
            if method == 'GET':
                supertype = request.url.params.get('supertype')
                if supertype in self.fail_categories:
                    return self._error(500, 'INTERNAL', 'database unavailable')
                types = [
                    record for identifier, record in self.types.items()
                    if not supertype or identifier.split('/')[0] == supertype
                ]
                return httpx.Response(200, json={'types': types})
            if method == 'POST':
                if self.fail_install:
                    return self._error(500, 'INTERNAL', 'database unavailable')
                identifier = json.loads(request.content)['type']
                if identifier in self.types:
                    return self._error(409, 'ALREADY_EXISTS', 'type exists')
                self.types[identifier] = {'type': identifier}
                return httpx.Response(201, json=self.types[identifier])

        if path.startswith('/types/'):
            identifier = path[len('/types/'):]
            if identifier not in self.types:
                return self._error(404, 'NOT_FOUND', 'no such type')
            if method == 'GET':
                return httpx.Response(200, json=self.types[identifier])
            if method == 'DELETE':
                del self.types[identifier]
                return httpx.Response(204)
            if method == 'PATCH':
                self.types[identifier].update(json.loads(request.content))
                return httpx.Response(200, json=self.types[identifier])

        if path.startswith('/volumes/'):
            parts = path.split('/')
            volume = parts[2]
            indexes = self.indexes.setdefault(volume, {})
            if method == 'POST' and len(parts) == 4:
                body = json.loads(request.content)
                if body['name'] in self.fail_indexes:
                    return self._error(500, 'IO_ERROR', 'volume is read-only')
                if body['name'] in indexes:
                    return self._error(409, 'ALREADY_EXISTS', 'index exists')
                indexes[body['name']] = body['type']
                return httpx.Response(201, json=body)
            if method == 'DELETE' and len(parts) == 5:
                name = parts[4]
                if name in self.fail_indexes:
                    return self._error(500, 'IO_ERROR', 'volume is read-only')
                if name not in indexes:
                    return self._error(404, 'NOT_FOUND', 'no such index')
                del indexes[name]
                return httpx.Response(204)

        return httpx.Response(404)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .mime directory
    """
    config_dir = tmp_path / '.mime'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def fake_registry():
    return FakeRegistry()


@pytest.fixture
def registry_session(fake_registry):
    session = httpx.Client(transport=httpx.MockTransport(fake_registry), base_url='http://test')
    yield session
    session.close()


@pytest.fixture
def registry_client(temp_config, registry_session):
    """RegistryClient talking to the in-memory fake registry."""
    return RegistryClient(temp_config, session=registry_session)


@pytest.fixture
def index_client(temp_config, registry_session):
    """IndexClient talking to the in-memory fake registry."""
    return IndexClient(temp_config, session=registry_session)


@pytest.fixture
def make_resource_file(tmp_path):
    """
    Factory writing a resource container with the given META fields.

    Fields left as None are omitted from the container. With attach_to,
    the container is appended to a file that starts with binary content.
    """
    def _make(
        name='sample.rsrc',
        mime_type='text/x-sample',
        short_desc='Sample',
        long_desc=None,
        pref_app=None,
        sniffer_rule=None,
        extensions=None,
        attributes=None,
        icon=None,
        attach_to=None,
    ):
        entries = []
        if mime_type is not None:
            entries.append(string_resource(META_TYPE, mime_type, id=1))
        if short_desc is not None:
            entries.append(string_resource(META_SHORT_DESC, short_desc, id=1))
        if long_desc is not None:
            entries.append(string_resource(META_LONG_DESC, long_desc, id=1))
        if pref_app is not None:
            entries.append(string_resource(META_PREF_APP, pref_app, id=1))
        if sniffer_rule is not None:
            entries.append(string_resource(META_SNIFF_RULE, sniffer_rule, id=1))
        if extensions is not None:
            entries.append(message_resource(META_EXTENSIONS, {'extensions': extensions}, id=1))
        if attributes is not None:
            entries.append(message_resource(META_ATTR_INFO, {'attributes': attributes}, id=1))
        if icon is not None:
            entries.append(ResourceEntry(META_ICON.type_code, META_ICON.name, icon, id=1))

        path = tmp_path / name
        if attach_to is not None:
            path.write_bytes(attach_to)
            attach_resources(path, entries)
        else:
            write_resources(path, entries)
        return path

    return _make
