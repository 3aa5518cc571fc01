"""Tests for CLI argument parsing."""

import pytest

from mime_cli.models import DeleteCommand, HelpCommand, InstallCommand, ListCommand
from mime_cli.parser import ParseError, parse_command


def test_parse_install():
    assert parse_command(['install', 'sample.rsrc']) == InstallCommand(target='sample.rsrc')


def test_parse_delete_and_uninstall_alias():
    assert parse_command(['delete', 'text/x-sample']) == DeleteCommand(identifier='text/x-sample')
    assert parse_command(['uninstall', 'text/x-sample']) == DeleteCommand(identifier='text/x-sample')


def test_parse_list():
    assert parse_command(['list']) == ListCommand()
    assert parse_command(['list', 'entity']) == ListCommand(supertype='entity')


@pytest.mark.parametrize('args', [['help'], ['-h'], ['--help']])
def test_parse_help(args):
    assert isinstance(parse_command(args), HelpCommand)


@pytest.mark.parametrize('args,message', [
    ([], 'No command'),
    (['frobnicate'], 'unknown command frobnicate'),
    (['install'], 'install requires exactly 1 argument'),
    (['install', 'a', 'b'], 'install requires exactly 1 argument'),
    (['delete'], 'delete requires exactly 1 argument'),
    (['list', 'entity', 'relation'], 'list takes at most 1 argument'),
])
def test_parse_errors(args, message):
    with pytest.raises(ParseError, match=message):
        parse_command(args)


def test_commands_are_not_prefix_matched():
    """Test 'installer' is not mistaken for 'install'."""
    with pytest.raises(ParseError):
        parse_command(['installer', 'x'])
