"""Tests for the resource container reader and writer."""

import base64
import json

import pytest

from mime_common.exceptions import ResourceError
from mime_common.resources import (
    META_ICON,
    META_SHORT_DESC,
    META_TYPE,
    ResourceSource,
    decode_container,
)
from mime_common.types import AttributeType


def test_load_strings_strip_trailing_nul(make_resource_file):
    """Test string resources are decoded without their NUL terminator."""
    path = make_resource_file(mime_type='text/x-sample', short_desc='Sample')

    with ResourceSource(path) as source:
        assert source.load_string(META_TYPE) == 'text/x-sample'
        assert source.load_string(META_SHORT_DESC) == 'Sample'
        assert source.load(META_SHORT_DESC) == b'Sample\x00'


def test_absent_resource_returns_none(make_resource_file):
    """Test missing blocks are reported as None, not as errors."""
    path = make_resource_file()

    with ResourceSource(path) as source:
        assert source.load_extensions() is None
        assert source.load_attributes() is None
        assert source.load_icon() is None


def test_lookup_is_keyed_by_type_code_and_name(tmp_path):
    """Test a block with the right name but wrong type code is not found."""
    path = tmp_path / 'wrong.rsrc'
    path.write_text(json.dumps({
        'format': 'mime-resources',
        'version': 1,
        'resources': [{'type': 'MSGG', 'id': 1, 'name': 'META:TYPE', 'data': base64.b64encode(b'text/x').decode()}],
    }))

    with ResourceSource(path) as source:
        assert source.load(META_TYPE) is None


def test_attached_container_reads_like_standalone(make_resource_file):
    """Test resources appended to another file are found."""
    path = make_resource_file(
        name='program',
        extensions=['smp'],
        attach_to=b'\x7fELF\x02\x01\x01' + b'\x00' * 64,
    )

    with ResourceSource(path) as source:
        assert source.load_string(META_TYPE) == 'text/x-sample'
        assert source.load_extensions() == ['smp']


def test_missing_file_raises(tmp_path):
    """Test an unreadable path is a ResourceError."""
    with pytest.raises(ResourceError, match='error reading resources'):
        ResourceSource(tmp_path / 'nope.rsrc').open()


def test_plain_file_is_not_a_container(tmp_path):
    """Test a file without resources is rejected."""
    path = tmp_path / 'plain.txt'
    path.write_text('just some text')

    with pytest.raises(ResourceError, match='not a resource container'):
        ResourceSource(path).open()


def test_binary_file_is_not_a_container(tmp_path):
    """Test binary content without the trailer is rejected."""
    path = tmp_path / 'blob.bin'
    path.write_bytes(b'\xff\xfe\x00\x01' * 16)

    with pytest.raises(ResourceError):
        ResourceSource(path).open()


def test_unsupported_version():
    """Test containers of an unknown version are rejected."""
    raw = json.dumps({'format': 'mime-resources', 'version': 99, 'resources': []}).encode()

    with pytest.raises(ResourceError, match='version'):
        decode_container(raw)


def test_resources_not_a_list_raises():
    raw = json.dumps({'format': 'mime-resources', 'version': 1, 'resources': 5}).encode()

    with pytest.raises(ResourceError, match='resources must be a list'):
        decode_container(raw)


def test_corrupt_payload_raises():
    """Test undecodable base64 payload is a corrupt container."""
    raw = json.dumps({
        'format': 'mime-resources',
        'version': 1,
        'resources': [{'type': 'CSTR', 'name': 'META:TYPE', 'data': '!!not base64!!'}],
    }).encode()

    with pytest.raises(ResourceError, match='corrupt resource #0'):
        decode_container(raw)


def test_declared_size_larger_than_payload_raises():
    """Test a payload shorter than its declared size is rejected."""
    raw = json.dumps({
        'format': 'mime-resources',
        'version': 1,
        'resources': [{'type': 'VICN', 'name': 'META:ICON', 'size': 10, 'data': base64.b64encode(b'abc').decode()}],
    }).encode()

    with pytest.raises(ResourceError):
        decode_container(raw)


def test_declared_size_truncates_payload():
    """Test the declared size bounds the returned block."""
    raw = json.dumps({
        'format': 'mime-resources',
        'version': 1,
        'resources': [{'type': 'VICN', 'name': 'META:ICON', 'size': 2, 'data': base64.b64encode(b'abcdef').decode()}],
    }).encode()

    entries = decode_container(raw)
    assert entries[0].data == b'ab'
    assert entries[0].size == 2


def test_load_before_open_raises(make_resource_file):
    """Test the source must be opened before lookups."""
    source = ResourceSource(make_resource_file())

    with pytest.raises(ResourceError, match='not open'):
        source.load(META_TYPE)


def test_source_released_after_context(make_resource_file):
    """Test blocks are released when the context exits."""
    with ResourceSource(make_resource_file()) as source:
        pass

    with pytest.raises(ResourceError):
        source.load(META_TYPE)


def test_source_released_on_error(make_resource_file):
    """Test blocks are released when the body raises."""
    with pytest.raises(RuntimeError):
        with ResourceSource(make_resource_file()) as source:
            raise RuntimeError('abort')

    with pytest.raises(ResourceError):
        source.load(META_TYPE)


def test_extensions_strip_leading_dot(make_resource_file):
    """Test extensions are normalized and keep their order."""
    path = make_resource_file(extensions=['.smp', 'sample', '.SMPL'])

    with ResourceSource(path) as source:
        assert source.load_extensions() == ['smp', 'sample', 'SMPL']


def test_unreadable_message_is_treated_as_absent(tmp_path):
    """Test a message block that does not decode is skipped."""
    path = tmp_path / 'bad-message.rsrc'
    path.write_text(json.dumps({
        'format': 'mime-resources',
        'version': 1,
        'resources': [{'type': 'MSGG', 'name': 'META:EXTENS', 'data': base64.b64encode(b'\x00garbage').decode()}],
    }))

    with ResourceSource(path) as source:
        assert source.load_extensions() is None


def test_attributes_parsed(make_resource_file):
    """Test attribute descriptors, type aliases and the tri-state searchable flag."""
    path = make_resource_file(attributes=[
        {'name': 'SAMPLE:score', 'public_name': 'Score', 'type': 'integer', 'searchable': True},
        {'name': 'SAMPLE:title', 'public_name': 'Title', 'type': 'string', 'searchable': False},
        {'name': 'SAMPLE:notes', 'type': 'CSTR', 'viewable': False},
    ])

    with ResourceSource(path) as source:
        attributes = source.load_attributes()

    assert [attr.name for attr in attributes] == ['SAMPLE:score', 'SAMPLE:title', 'SAMPLE:notes']
    assert attributes[0].type is AttributeType.INT32
    assert attributes[0].searchable is True
    assert attributes[1].searchable is False
    assert attributes[2].searchable is None
    assert attributes[2].public_name == 'SAMPLE:notes'
    assert attributes[2].type is AttributeType.STRING
    assert attributes[2].viewable is False


def test_attribute_with_invalid_searchable_raises(make_resource_file):
    """Test a non-boolean searchable flag is rejected."""
    path = make_resource_file(attributes=[{'name': 'SAMPLE:score', 'type': 'int32', 'searchable': 'yes'}])

    with ResourceSource(path) as source:
        with pytest.raises(ResourceError, match='searchable'):
            source.load_attributes()


def test_attribute_with_unknown_type_raises(make_resource_file):
    """Test an unknown attribute type tag is rejected."""
    path = make_resource_file(attributes=[{'name': 'SAMPLE:score', 'type': 'quaternion'}])

    with ResourceSource(path) as source:
        with pytest.raises(ResourceError):
            source.load_attributes()


def test_icon_loaded_with_exact_bytes(make_resource_file):
    """Test the icon blob is returned verbatim."""
    icon = bytes(range(256))
    path = make_resource_file(icon=icon)

    with ResourceSource(path) as source:
        assert source.load_icon() == icon
        assert len(source.load(META_ICON)) == 256


def test_empty_icon_is_skipped(make_resource_file):
    """Test a zero-length icon counts as absent."""
    path = make_resource_file(icon=b'')

    with ResourceSource(path) as source:
        assert source.load_icon() is None
