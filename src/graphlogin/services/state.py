"""CSRF state storage.

The login helper never touches a session directly. It goes through
``StateStorage``, which namespaces the key and checks that the backing
``StateStore`` is ready before every read and write.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Protocol

from graphlogin.config import DEFAULT_SESSION_PREFIX
from graphlogin.models.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

STORE_ERROR_CODE = 720
LOAD_ERROR_CODE = 721


class StateStore(Protocol):
    """Request scoped key-value store, typically the user's session."""

    def is_active(self) -> bool:
        """Whether the store is ready for reads and writes."""
        ...

    def put(self, key: str, value: str) -> None: ...

    def get(self, key: str) -> str | None: ...


class InMemoryStateStore:
    """Dictionary backed store with an explicit start/close lifecycle.

    Refuses reads and writes while not started, which mirrors a web session
    that was never opened.
    """

    def __init__(self):
        self._data: dict[str, str] = {}
        self._active = False

    def start(self) -> None:
        self._active = True

    def close(self) -> None:
        self._active = False

    def is_active(self) -> bool:
        return self._active

    def put(self, key: str, value: str) -> None:
        self._ensure_active()
        self._data[key] = value

    def get(self, key: str) -> str | None:
        self._ensure_active()
        return self._data.get(key)

    def _ensure_active(self) -> None:
        if not self._active:
            raise StorageUnavailableError("In-memory state store is not started")


class MappingStateStore:
    """Adapter over a session mapping managed by the web framework.

    Works with anything dict-like, e.g. Starlette's ``request.session``.
    """

    def __init__(self, mapping: MutableMapping[str, str]):
        self._mapping = mapping

    def is_active(self) -> bool:
        return True

    def put(self, key: str, value: str) -> None:
        self._mapping[key] = value

    def get(self, key: str) -> str | None:
        return self._mapping.get(key)


class StateStorage:
    """Stores and loads the CSRF state under a namespaced key.

    Args:
        store: Backing state store
        prefix: Key prefix so several helpers can share one store
        check_status: Refuse to use the store when it reports not active
    """

    def __init__(
        self,
        store: StateStore,
        prefix: str = DEFAULT_SESSION_PREFIX,
        check_status: bool = True,
    ):
        self.store = store
        self.prefix = prefix
        self.check_status = check_status

    @property
    def key(self) -> str:
        return f"{self.prefix}state"

    def disable_status_check(self) -> None:
        """Skip the readiness check for callers that manage the store lifecycle."""
        self.check_status = False

    def save(self, state: str) -> None:
        """Persist the state.

        Raises:
            StorageUnavailableError: If the store is not active
        """
        if self._store_unavailable():
            raise StorageUnavailableError(
                "Session not active, could not store state.", STORE_ERROR_CODE
            )
        self.store.put(self.key, state)
        logger.debug(f"Stored CSRF state under '{self.key}'")

    def load(self) -> str | None:
        """Load the previously stored state, or None if nothing was stored.

        Raises:
            StorageUnavailableError: If the store is not active
        """
        if self._store_unavailable():
            raise StorageUnavailableError(
                "Session not active, could not load state.", LOAD_ERROR_CODE
            )
        return self.store.get(self.key)

    def _store_unavailable(self) -> bool:
        return self.check_status and not self.store.is_active()
