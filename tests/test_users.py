"""Tests for user id parsing and resolution."""

import pytest

from wetodo.core.exceptions import InvalidInputError, UnknownProviderError, UserNotFoundError
from wetodo.core.users import LocalProviderResolver, ProviderResolver, User, UserDirectory


class CountingResolver(ProviderResolver):
    def __init__(self):
        super().__init__("gh")
        self.calls = 0

    def resolve(self, uid):
        self.calls += 1
        return {"name": f"octo{uid}", "avatar": f"https://example.invalid/{uid}.png"}


def test_user_splits_provider_and_uid():
    user = User("gh:1234")
    assert user.provider == "gh"
    assert user.uid == "1234"


@pytest.mark.parametrize("user_id", ["", "local", "local:", ":1", "Local:1", "local:x", "local:1:2", "local:1\n"])
def test_user_rejects_malformed_ids(user_id):
    with pytest.raises(InvalidInputError):
        User(user_id)


@pytest.mark.parametrize("provider", ["", "GH", "g1", "my provider"])
def test_provider_names_are_validated(provider):
    with pytest.raises(InvalidInputError):
        ProviderResolver(provider)


def test_local_users():
    directory = UserDirectory()

    assert directory.resolve("local:1").result() == {"name": "John Doe", "id": "local:1"}
    assert directory.display_name("local:0") == "WeToDo"


def test_local_resolver_unknown_uid():
    with pytest.raises(UserNotFoundError):
        LocalProviderResolver().resolve("99")


def test_errors_are_set_on_the_future():
    directory = UserDirectory()

    assert isinstance(directory.resolve("local:99").exception(), UserNotFoundError)
    assert isinstance(directory.resolve("gh:1").exception(), UnknownProviderError)
    assert isinstance(directory.resolve("nonsense").exception(), InvalidInputError)


def test_display_name_falls_back():
    directory = UserDirectory()

    assert directory.display_name("gh:1") == "gh:1"
    assert directory.display_name("gh:1", default="someone") == "someone"


def test_registered_resolver_results_are_cached():
    directory = UserDirectory()
    resolver = CountingResolver()
    directory.register(resolver)

    first = directory.resolve("gh:7").result()
    second = directory.resolve("gh:7").result()

    assert first == second
    assert first["name"] == "octo7"
    assert first["id"] == "gh:7"
    assert resolver.calls == 1
    assert directory.is_cached("gh:7")


def test_failures_are_not_cached():
    directory = UserDirectory()
    directory.resolve("local:99")
    assert not directory.is_cached("local:99")


def test_cached_data_cannot_be_changed_through_results():
    directory = UserDirectory()
    directory.resolve("local:2").result()["name"] = "Mallory"
    assert directory.display_name("local:2") == "Jane Doe"


def test_directory_without_defaults():
    directory = UserDirectory(register_defaults=False)
    assert isinstance(directory.resolve("local:0").exception(), UnknownProviderError)


def test_register_rejects_other_objects():
    with pytest.raises(InvalidInputError):
        UserDirectory().register(object())
