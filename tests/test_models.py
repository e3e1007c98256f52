"""Tests for Modification, Entry and Change."""

import json
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from wetodo.core.constants import Command, CHANGE_CREATE
from wetodo.core.exceptions import MalformedModificationError, UnknownCommandError
from wetodo.core.models import Change, Entry, Modification


WELL_FORMED_LINES = [
    "1234 CREATE g:123 note|fff",
    "1700000000000 CHECK local:0 3",
    "1700000000001 RENAME local:12 3|Oat milk | barista",
    "1700000000002 CHANGEDESC local:0 3|line one\\nline two",
    "1700000000003 RELOCATE gh:1234 3|0",
    "1700000000004 LISTRENAME local:0 Weekly groceries",
    "1700000000005 DELETE local:0 3",
    "1700000000006 CLEAR local:0 -",
]


@pytest.mark.parametrize("line", WELL_FORMED_LINES)
def test_parse_then_serialize_reproduces_line(line):
    """Well-formed lines survive a parse/serialize cycle byte for byte."""
    assert str(Modification.parse(line)) == line


def test_parse_fields():
    modification = Modification.parse("1234 CREATE g:123 note|fff")

    assert modification.time == 1234
    assert modification.command == "CREATE"
    assert modification.user == "g:123"
    assert modification.data == "note|fff"
    assert Modification.parse(str(modification)) == modification


def test_data_keeps_inner_spaces():
    modification = Modification.parse("5 RENAME local:0 1|a  b  c")
    assert modification.data == "1|a  b  c"


@pytest.mark.parametrize("line", [
    "",
    "CREATE local:0 note|x",
    "12 CREATE local:0",
    "12 create local:0 note|x",
    "12 CREATE Local:0 note|x",
    "12 CREATE local:x note|x",
    "-5 CREATE local:0 note|x",
    "12 CREATE local:0 ",
    "1 CREATE local:0 note|x\n",
])
def test_parse_rejects_malformed_lines(line):
    with pytest.raises(MalformedModificationError):
        Modification.parse(line)


def test_parse_rejects_unknown_command():
    with pytest.raises(UnknownCommandError) as exc_info:
        Modification.parse("12 EXPLODE local:0 1")

    assert exc_info.value.command == "EXPLODE"
    assert "Unknown command: EXPLODE" in str(exc_info.value)


def test_unknown_command_is_a_malformed_modification():
    """Callers that skip bad lines only need to catch one error type."""
    with pytest.raises(MalformedModificationError):
        Modification.parse("12 EXPLODE local:0 1")


def test_constructor_validates_fields():
    with pytest.raises(MalformedModificationError):
        Modification(time=-1, command="CHECK", user="local:0", data="1")
    with pytest.raises(MalformedModificationError):
        Modification(time=True, command="CHECK", user="local:0", data="1")
    with pytest.raises(MalformedModificationError):
        Modification(time=1, command="CHECK", user="nobody", data="1")
    with pytest.raises(MalformedModificationError):
        Modification(time=1, command="CHECK", user="local:0\n", data="1")
    with pytest.raises(MalformedModificationError):
        Modification(time=1, command="CHECK", user="local:0", data="")
    with pytest.raises(MalformedModificationError):
        Modification(time=1, command="RENAME", user="local:0", data="1|two\nlines")
    with pytest.raises(UnknownCommandError):
        Modification(time=1, command="check", user="local:0", data="1")


def test_create_accepts_enum_and_stamps_time():
    before = int(datetime.now(timezone.utc).timestamp() * 1000)
    modification = Modification.create(Command.CHECK, "local:0", "1")

    assert modification.command == "CHECK"
    assert modification.time >= before
    assert str(modification).split(" ")[1] == "CHECK"


def test_create_with_explicit_time():
    modification = Modification.create("CREATE", "local:1", "check|Milk", time=42)
    assert modification.to_line() == "42 CREATE local:1 check|Milk"


def test_modifications_are_immutable():
    modification = Modification.parse("1 CHECK local:0 1")
    with pytest.raises(FrozenInstanceError):
        modification.data = "2"


def test_handler_lookup():
    modification = Modification.parse("1 CHECK local:0 1")
    assert modification.handler.command == "CHECK"


def test_target_id():
    assert Modification.parse("1 CHECK local:0 7").target_id == 7
    assert Modification.parse("1 RENAME local:0 7|x").target_id == 7
    assert Modification.parse("1 CREATE local:0 note|7").target_id is None
    assert Modification.parse("1 LISTRENAME local:0 7").target_id is None


def test_targets_matches_whole_id_only():
    rename = Modification.parse("1 RENAME local:0 12|Bread")

    assert rename.targets(12)
    assert not rename.targets(1)
    assert not Modification.parse("1 CREATE local:0 note|12").targets(12)
    assert Modification.parse("1 DELETE local:0 12").targets(12)


def test_timestamp_is_utc():
    modification = Modification.parse("1000 CHECK local:0 1")
    assert modification.timestamp == datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)


def test_to_json():
    data = json.loads(Modification.parse("1 CHECK local:0 1").to_json())
    assert data == {"time": 1, "command": "CHECK", "user": "local:0", "data": "1"}


def test_entry_from_modification_records_create():
    creator = Modification.parse("10 CREATE local:2 check|Milk")
    entry = Entry.from_modification(0, "check", "Milk", creator)

    assert entry.created_by is creator
    assert entry.changes == [Change(time=10, user="local:2", kind=CHANGE_CREATE)]
    assert entry.is_checkable
    assert not entry.checked


def test_entry_description_text_expands_newlines():
    entry = Entry(id=0, type="note", title="Recipe", description="flour\\nsugar")
    assert entry.description_text == "flour\nsugar"
    assert Entry(id=1, type="note", title="x").description_text is None


def test_entry_to_dict_leaves_out_creator():
    creator = Modification.parse("10 CREATE local:0 rule|Dairy")
    data = Entry.from_modification(3, "rule", "Dairy", creator).to_dict()

    assert data["id"] == 3
    assert data["type"] == "rule"
    assert data["changes"] == [{"time": 10, "user": "local:0", "kind": "CREATE"}]
    assert "created_by" not in data
