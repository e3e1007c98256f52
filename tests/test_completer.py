"""Tests for REPL autocompletion."""

from prompt_toolkit.document import Document

from wetodo.core import service
from wetodo.repl.completer import create_completer


def complete(text, active_list=None):
    completer = create_completer(lambda: active_list)
    return [c.text for c in completer.get_completions(Document(text, cursor_position=len(text)), None)]


def test_command_completion():
    assert complete("") == create_completer().COMMANDS
    assert complete("h") == ["history", "help"]
    assert complete("RE") == ["rename"]


def test_no_command_matches():
    assert complete("xyz") == []


def test_list_titles_after_use():
    service.create_list("Groceries")
    service.create_list("Road trip")

    assert sorted(complete("use ")) == ['"Road trip"', "Groceries"]
    assert complete("use gro") == ["Groceries"]
    assert complete('show "Road') == ['"Road trip"']


def test_list_titles_only_for_first_arg():
    service.create_list("Groceries")
    assert complete("use Groceries ") == []


def test_entry_ids_from_active_list():
    groceries = service.create_list("Groceries")
    for title in ("Milk", "Bread", "Eggs"):
        service.add_entry(groceries, title)

    assert complete("check ", groceries) == ["0", "1", "2"]
    assert complete("rm 1", groceries) == ["1"]

    completer = create_completer(lambda: groceries)
    completion = next(completer.get_completions(Document("rename "), None))
    assert completion.display_meta_text == "Milk"


def test_entry_ids_without_active_list():
    assert complete("check ") == []


def test_entry_types_after_type_flag():
    assert complete("add Milk --type ") == ["note", "check", "rule"]
    assert complete("add Milk --type r") == ["rule"]


def test_flag_completion():
    assert complete("add Milk --") == ["--type"]
    assert complete("fav ") == ["--off"]
    assert complete("rm 1 --y") == ["--yes"]
    assert complete("log --r") == ["--raw"]
    assert complete("lists --") == []


def test_plain_words_get_no_flag_suggestions():
    assert complete("add Mil") == []
