"""Tests for the service layer."""

import pytest

from wetodo.core import service
from wetodo.core.constants import CHANGE_CHECK, CHANGE_CREATE, CHANGE_EDIT
from wetodo.core.exceptions import EntryNotFoundError, InvalidInputError, ListNotFoundError
from wetodo.core.models import Modification


@pytest.fixture
def groceries():
    return service.create_list("Groceries")


def reload(todo_list):
    return service.get_list(todo_list.uuid)


# --- Lists ---


def test_create_list_is_saved(groceries):
    loaded = reload(groceries)

    assert loaded.title == "Groceries"
    assert loaded.users == ["local:0"]
    assert loaded.entries == []


def test_create_list_trims_title():
    assert service.create_list("  Trip  ").title == "Trip"


@pytest.mark.parametrize("title", ["", "   ", "two\nlines", "Starred*"])
def test_create_list_rejects_bad_titles(title):
    with pytest.raises(InvalidInputError):
        service.create_list(title)


def test_create_list_rejects_bad_user():
    with pytest.raises(InvalidInputError):
        service.create_list("Trip", user="bob")


def test_get_missing_list():
    assert service.get_list("nope") is None


def test_find_list_by_uuid_prefix_and_title(groceries):
    other = service.create_list("Hardware")

    assert service.find_list(groceries.uuid).uuid == groceries.uuid
    assert service.find_list(other.uuid[:8]).uuid == other.uuid
    assert service.find_list("groceries").uuid == groceries.uuid
    assert service.find_list("  HARDWARE ").uuid == other.uuid


def test_find_list_short_prefix_is_not_enough(groceries):
    with pytest.raises(ListNotFoundError):
        service.find_list(groceries.uuid[:3])


def test_find_list_ambiguous_title():
    service.create_list("Trip")
    service.create_list("trip")

    with pytest.raises(InvalidInputError) as exc_info:
        service.find_list("Trip")
    assert "Several lists" in str(exc_info.value)


def test_find_list_errors():
    with pytest.raises(ListNotFoundError):
        service.find_list("Nothing here")
    with pytest.raises(InvalidInputError):
        service.find_list("  ")


def test_load_lists_skips_unreadable_files(groceries, isolated_storage, caplog):
    (isolated_storage / "broken.list").write_text("", encoding="utf-8")

    lists = service.load_lists()

    assert [l.uuid for l in lists] == [groceries.uuid]
    assert "Skipping unreadable list" in caplog.text


def test_load_lists_survives_invalid_utf8(groceries, isolated_storage, caplog):
    (isolated_storage / "garbled.list").write_bytes(
        b"Garbled\nlocal:0\n1 CREATE local:0 check|Milk\n2 CREATE local:0 note|\xff\xfe"
    )
    (isolated_storage / "unreadable.list").write_bytes(b"\xffTitle\nlocal:0")

    lists = {l.uuid: l for l in service.load_lists()}

    assert set(lists) == {groceries.uuid, "garbled"}
    assert [e.title for e in lists["garbled"].entries] == ["Milk"]
    assert "not valid UTF-8" in caplog.text
    assert "Skipping unreadable list" in caplog.text


def test_list_lists_puts_favorites_first_then_recent():
    idle = service.create_list("Idle")
    busy = service.create_list("Busy")
    starred = service.create_list("Starred")

    service.add_entry(busy, "Something")
    service.set_favorite(starred)

    assert [l.title for l in service.list_lists()] == ["Starred", "Busy", "Idle"]
    assert idle.update_time is None


def test_set_favorite_round_trip(groceries):
    service.set_favorite(groceries)
    assert reload(groceries).is_favorite

    service.set_favorite(groceries, False)
    assert not reload(groceries).is_favorite


def test_share_list(groceries):
    assert service.share_list(groceries, "local:1")
    assert not service.share_list(groceries, "local:1")
    assert reload(groceries).users == ["local:0", "local:1"]

    with pytest.raises(InvalidInputError):
        service.share_list(groceries, "everyone")


def test_rename_list(groceries):
    service.rename_list(groceries, "Weekly groceries")

    loaded = reload(groceries)
    assert loaded.title == "Weekly groceries"
    assert loaded.modifications[-1].command == "LISTRENAME"


def test_rename_list_keeps_favorite(groceries):
    service.set_favorite(groceries)
    service.rename_list(groceries, "Weekly")

    loaded = reload(groceries)
    assert loaded.title == "Weekly"
    assert loaded.is_favorite


def test_clear_list(groceries):
    service.add_entry(groceries, "Milk")
    service.add_entry(groceries, "Bread")

    service.clear_list(groceries)

    loaded = reload(groceries)
    assert loaded.entries == []
    assert [m.command for m in loaded.modifications] == ["CLEAR"]
    assert service.add_entry(loaded, "Eggs").id == 0


def test_delete_list(groceries):
    service.delete_list(groceries.uuid)

    assert service.get_list(groceries.uuid) is None
    with pytest.raises(ListNotFoundError):
        service.delete_list(groceries.uuid)


# --- Entries ---


def test_add_entry(groceries):
    milk = service.add_entry(groceries, "  Milk ")
    note = service.add_entry(groceries, "Bring bags", entry_type="NOTE", user="local:1")

    assert (milk.id, milk.title, milk.type) == (0, "Milk", "check")
    assert (note.id, note.type) == (1, "note")
    assert note.changes[0].user == "local:1"
    assert [e.title for e in reload(groceries).entries] == ["Milk", "Bring bags"]


@pytest.mark.parametrize("title, entry_type", [
    ("", "check"),
    ("two\nlines", "check"),
    ("Milk", "todo"),
])
def test_add_entry_validation(groceries, title, entry_type):
    with pytest.raises(InvalidInputError):
        service.add_entry(groceries, title, entry_type=entry_type)
    assert reload(groceries).modifications == []


def test_check_entry_toggles(groceries):
    service.add_entry(groceries, "Milk")

    assert service.check_entry(groceries, 0).checked
    assert not service.check_entry(groceries, 0).checked

    kinds = [c.kind for c in service.entry_history(reload(groceries), 0)]
    assert kinds[0] == CHANGE_CREATE
    assert kinds[1] == CHANGE_CHECK


def test_only_check_entries_can_be_checked(groceries):
    service.add_entry(groceries, "Dairy", entry_type="rule")

    with pytest.raises(InvalidInputError):
        service.check_entry(groceries, 0)


def test_missing_entries(groceries):
    for call in (
        lambda: service.check_entry(groceries, 3),
        lambda: service.rename_entry(groceries, 3, "x"),
        lambda: service.describe_entry(groceries, 3, "x"),
        lambda: service.relocate_entry(groceries, 3, 0),
        lambda: service.delete_entry(groceries, 3),
        lambda: service.entry_history(groceries, 3),
    ):
        with pytest.raises(EntryNotFoundError):
            call()


def test_rename_entry(groceries):
    service.add_entry(groceries, "Milk")
    service.rename_entry(groceries, 0, "Oat milk")

    entry = reload(groceries).entries[0]
    assert entry.title == "Oat milk"
    assert entry.changes[-1].kind == CHANGE_EDIT

    with pytest.raises(InvalidInputError):
        service.rename_entry(groceries, 0, " ")


def test_describe_entry_escapes_newlines(groceries):
    service.add_entry(groceries, "Cake", entry_type="note")
    service.describe_entry(groceries, 0, "flour\r\nsugar\n")

    entry = reload(groceries).entries[0]
    assert entry.description == "flour\\nsugar"
    assert entry.description_text == "flour\nsugar"

    service.describe_entry(groceries, 0, "   ")
    assert reload(groceries).entries[0].description is None


def test_relocate_entry(groceries):
    for title in ("A", "B", "C"):
        service.add_entry(groceries, title)

    service.relocate_entry(groceries, 2, 0)
    assert [e.title for e in reload(groceries).entries] == ["C", "A", "B"]

    with pytest.raises(InvalidInputError):
        service.relocate_entry(groceries, 0, -1)


def test_delete_entry(groceries):
    service.add_entry(groceries, "Milk")
    service.add_entry(groceries, "Bread")

    removed = service.delete_entry(groceries, 0)

    assert removed.title == "Milk"
    loaded = reload(groceries)
    assert [(e.id, e.title) for e in loaded.entries] == [(1, "Bread")]
    assert service.add_entry(loaded, "Eggs").id == 2


def test_new_records_never_predate_the_log(groceries):
    future = 10 ** 15
    groceries.modify_and_save(Modification(time=future, command="CREATE", user="local:1", data="check|Milk"))

    service.check_entry(groceries, 0)

    last = groceries.modifications[-1]
    assert last.command == "CHECK"
    assert last.time == future
    assert reload(groceries).entries[0].checked
