"""Tests for REPL input parsing."""

import pytest

from wetodo.repl.parser import parse_command


def test_empty_input():
    result = parse_command("   ")
    assert result.command == ""
    assert result.args == []
    assert result.flags == {}


def test_command_is_lowercased():
    result = parse_command("ADD Milk")
    assert result.command == "add"
    assert result.args == ["Milk"]


def test_quoted_args_stay_together():
    result = parse_command('add "Oat milk" --type note')

    assert result.args == ["Oat milk"]
    assert result.flags == {"type": "note"}
    assert result.flag("type") == "note"
    assert result.raw_input == 'add "Oat milk" --type note'


def test_text_joins_unquoted_words():
    assert parse_command("add Buy oat milk").text() == "Buy oat milk"


@pytest.mark.parametrize("line, args, flags", [
    ("fav --off", [], {"off": True}),
    ("rm 1,2 --yes", ["1,2"], {"yes": True}),
    ("log --raw extra", ["extra"], {"raw": True}),
    ("clear --YES", [], {"yes": True}),
])
def test_boolean_flags_never_take_a_value(line, args, flags):
    result = parse_command(line)
    assert result.args == args
    assert result.flags == flags


def test_value_flag_without_value():
    result = parse_command("add Milk --type")

    assert result.flags == {"type": True}
    assert result.flag("type", "check") == "check"


def test_value_flag_followed_by_flag():
    result = parse_command("add Milk --type --yes")
    assert result.flags == {"type": True, "yes": True}


def test_bare_double_dash_is_positional():
    assert parse_command("add --").args == ["--"]


def test_unclosed_quote_falls_back_to_split():
    result = parse_command('add "Oat milk')
    assert result.args == ['"Oat', "milk"]
