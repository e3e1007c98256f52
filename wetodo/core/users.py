"""
FILE: wetodo/core/users.py
PURPOSE: Resolve "<provider>:<id>" user identifiers to display data
EXPORTS:
  - User (dataclass)
  - ProviderResolver (base class)
  - LocalProviderResolver
  - UserDirectory (resolver registry + cache)
DEPENDENCIES:
  - concurrent.futures (Future result type)
  - dataclasses (stdlib)
  - logging (stdlib)
  - wetodo.core.exceptions (InvalidInputError, UserNotFoundError, UnknownProviderError)
NOTES:
  - Only used to decorate output; replay never depends on it
  - The cache belongs to a UserDirectory instance created by the application,
    it's never reset behind the caller's back
  - resolve() always returns a Future, errors are set on it, not raised
"""

import logging
import re
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .exceptions import InvalidInputError, UnknownProviderError, UserNotFoundError


logger = logging.getLogger(__name__)

USER_ID_PATTERN = re.compile(r"([a-z]+):(\d+)")

# Built-in local profiles, indexed by uid
LOCAL_USERS = (
    "WeToDo",
    "John Doe",
    "Jane Doe",
)


@dataclass(frozen=True)
class User:
    """A user identifier split into provider and provider-specific uid."""

    id: str

    def __post_init__(self):
        if not isinstance(self.id, str) or not USER_ID_PATTERN.fullmatch(self.id):
            raise InvalidInputError(
                f"Invalid user id '{self.id}'. Expected '<provider>:<number>' (e.g. local:0)"
            )

    @property
    def provider(self) -> str:
        return self.id.partition(":")[0]

    @property
    def uid(self) -> str:
        return self.id.partition(":")[2]


class ProviderResolver:
    """Looks up users of one identity provider."""

    def __init__(self, provider: str):
        if not provider or not provider.isalpha() or not provider.islower():
            raise InvalidInputError(f"Invalid provider name '{provider}'")
        self.provider = provider

    def resolve(self, uid: str) -> Dict[str, Any]:
        """Return display data (at least 'name') for uid."""
        raise NotImplementedError


class LocalProviderResolver(ProviderResolver):
    """The 'local' provider: a fixed table of on-device profiles."""

    def __init__(self):
        super().__init__("local")

    def resolve(self, uid: str) -> Dict[str, Any]:
        index = int(uid)
        if index >= len(LOCAL_USERS):
            raise UserNotFoundError(f"local:{uid}")
        return {"name": LOCAL_USERS[index]}


class UserDirectory:
    """
    Resolver registry with a cache of resolved users.

    Create one per application run and pass it where user data is shown.

    Example:
        directory = UserDirectory()
        directory.resolve("local:1").result()  # {'name': 'John Doe', 'id': 'local:1'}
    """

    def __init__(self, register_defaults: bool = True):
        self._resolvers: Dict[str, ProviderResolver] = {}
        self._cache: Dict[str, Dict[str, Any]] = {}
        if register_defaults:
            self.register(LocalProviderResolver())

    def register(self, resolver: ProviderResolver) -> None:
        if not isinstance(resolver, ProviderResolver):
            raise InvalidInputError(f"Invalid resolver type {type(resolver).__name__}")
        self._resolvers[resolver.provider] = resolver

    def resolve(self, user_id: str) -> "Future[Dict[str, Any]]":
        """
        Resolve display data for a user id.

        Returns:
            Future completed with a dict holding at least 'id' and 'name',
            or with InvalidInputError / UnknownProviderError / UserNotFoundError
        """
        future: Future = Future()

        cached = self._cache.get(user_id)
        if cached is not None:
            future.set_result(dict(cached))
            return future

        try:
            user = User(user_id)
            resolver = self._resolvers.get(user.provider)
            if resolver is None:
                raise UnknownProviderError(user.provider)
            data = dict(resolver.resolve(user.uid))
        except Exception as e:
            logger.debug("Could not resolve user %s: %s", user_id, e)
            future.set_exception(e)
            return future

        data.setdefault("name", user_id)
        data["id"] = user_id
        self._cache[user_id] = data
        future.set_result(dict(data))
        return future

    def display_name(self, user_id: str, default: Optional[str] = None) -> str:
        """Resolved name for user_id, or default (the raw id) when unresolvable."""
        future = self.resolve(user_id)
        if future.exception() is not None:
            return default if default is not None else user_id
        return future.result()["name"]

    def is_cached(self, user_id: str) -> bool:
        return user_id in self._cache
