"""Tests for REPL command handling with an active list."""

import pytest

from wetodo.core import service
from wetodo.repl.main import execute_command, format_prompt, get_bottom_toolbar, repl_context
from wetodo.repl.parser import parse_command


@pytest.fixture(autouse=True)
def fresh_context():
    repl_context.active_list = None
    repl_context.user = "local:0"
    yield
    repl_context.active_list = None


def run(line, capsys):
    assert execute_command(parse_command(line))
    return capsys.readouterr().out


def titles():
    return [e.title for e in repl_context.refresh().entries]


def test_exit_and_quit(capsys):
    assert execute_command(parse_command("exit")) is False
    assert execute_command(parse_command("QUIT")) is False
    assert "Goodbye!" in capsys.readouterr().out


def test_empty_input_continues(capsys):
    assert execute_command(parse_command(""))
    assert capsys.readouterr().out == ""


def test_unknown_command(capsys):
    assert "Unknown command: frobnicate" in run("frobnicate", capsys)


def test_entry_commands_need_an_active_list(capsys):
    assert "No active list" in run("add Milk", capsys)


def test_new_makes_list_active(capsys):
    out = run("new Road trip", capsys)

    assert "Created list" in out
    assert repl_context.active_list.title == "Road trip"
    assert repl_context.get_prompt() == "wetodo:[Road trip]> "


def test_use_by_title_and_clear(capsys):
    groceries = service.create_list("Groceries")

    assert "Now using list" in run("use groceries", capsys)
    assert repl_context.active_list.uuid == groceries.uuid

    assert "Groceries" in run("use", capsys)

    run("use none", capsys)
    assert repl_context.active_list is None
    assert repl_context.get_prompt() == "wetodo> "


def test_use_unknown_list_shows_available(capsys):
    service.create_list("Groceries")

    out = run("use Hardware", capsys)

    assert "List Hardware not found" in out
    assert "Groceries" in out
    assert repl_context.active_list is None


def test_entry_workflow(capsys):
    run("new Groceries", capsys)

    assert "Added #0" in run('add "Oat milk"', capsys)
    assert "Added #1" in run("add Bring bags --type note", capsys)
    assert "Added #2" in run("add Bread", capsys)

    assert "Checked: Oat milk" in run("check 0", capsys)
    assert "Unchecked: Oat milk" in run("check 0", capsys)

    assert "Renamed entry 2" in run("rename 2 Rye bread", capsys)
    assert "position 0" in run("move 2 0", capsys)
    assert titles() == ["Rye bread", "Oat milk", "Bring bags"]

    assert "Updated description" in run("desc 1 canvas ones", capsys)
    assert repl_context.refresh().get_entry_by_id(1).description == "canvas ones"
    assert "Cleared description" in run("desc 1", capsys)

    assert "Deleted entry 1" in run("rm 1", capsys)
    assert titles() == ["Rye bread", "Oat milk"]


def test_entry_errors(capsys):
    run("new Groceries", capsys)
    run("add Dairy --type rule", capsys)

    assert "Entry ID required" in run("check", capsys)
    assert "Invalid entry ID" in run("rename x Milk", capsys)
    assert "Entry 5 not found" in run("history 5", capsys)
    assert "only check entries" in run("check 0", capsys)
    assert "Invalid entry type" in run("add Milk --type todo", capsys)
    assert "Position required" in run("move 0", capsys)
    assert "negative" in run("move 0 -1", capsys)


def test_rm_several_asks_first(capsys, monkeypatch):
    run("new Groceries", capsys)
    run("add A", capsys)
    run("add B", capsys)

    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    assert "Cancelled" in run("rm 0,1", capsys)
    assert titles() == ["A", "B"]

    run("rm 0,1 --yes", capsys)
    assert titles() == []


def test_history(capsys):
    run("new Groceries", capsys)
    run("add Milk", capsys)
    run("check 0", capsys)

    out = run("history 0", capsys)
    assert "CREATE" in out
    assert "CHECK" in out


def test_list_level_commands(capsys, monkeypatch):
    run("new Groceries", capsys)
    run("add Milk", capsys)

    assert "Renamed list" in run("title Weekly groceries", capsys)
    assert repl_context.active_list.title == "Weekly groceries"

    assert "is a favorite" in run("fav", capsys)
    assert repl_context.refresh().is_favorite
    run("fav --off", capsys)
    assert not repl_context.refresh().is_favorite

    assert "Shared" in run("share local:1", capsys)
    assert "already has" in run("share local:1", capsys)

    monkeypatch.setattr("builtins.input", lambda prompt: "y")
    assert "Cleared" in run("clear", capsys)
    assert titles() == []

    lines = run("log --raw", capsys).splitlines()
    assert [line.split(" ")[1] for line in lines if line] == ["CLEAR"]


def test_lists(capsys):
    assert "No lists yet" in run("lists", capsys)

    service.create_list("Groceries")
    assert "Groceries" in run("lists", capsys)


def test_show_named_list_and_alias(capsys):
    groceries = service.create_list("Groceries")
    service.add_entry(groceries, "Milk")

    assert "Milk" in run("show Groceries", capsys)
    run("use Groceries", capsys)
    assert "Milk" in run("ls", capsys)


def test_delete_active_list_clears_selection(capsys):
    run("new Groceries", capsys)

    run("delete --yes", capsys)

    assert repl_context.active_list is None
    assert service.list_lists() == []


def test_active_list_deleted_elsewhere(capsys):
    run("new Groceries", capsys)
    service.delete_list(repl_context.active_list.uuid)

    assert "No active list" in run("show", capsys)
    assert repl_context.active_list is None


def test_prompt_and_toolbar_escape_markup(capsys):
    run("new Salt & <pepper>", capsys)
    run("add Milk", capsys)

    assert "&amp;" in format_prompt().value
    toolbar = get_bottom_toolbar().value
    assert "1 open" in toolbar
    assert "personal" in toolbar


def test_help(capsys):
    out = run("help", capsys)
    assert "use" in out
    assert "history" in out
