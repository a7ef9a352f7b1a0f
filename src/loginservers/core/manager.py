"""Registry of login servers and the currently selected one."""

from __future__ import annotations

import logging
from collections.abc import Callable

from loginservers.core.catalog import load_catalog
from loginservers.core.models import LoginServer, ServerCatalog
from loginservers.core.storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

SELECTED_URL_KEY = "login_servers.selected_url"
CUSTOM_SERVERS_NAMESPACE = "login_servers.custom"


class LoginServerManager:
    """
    Built-in login servers followed by user-added custom servers, plus the
    selected entry. Custom servers and the selected URL are persisted to the
    given store and restored on construction.

    Storage is treated as a best-effort cache: read failures fall back to the
    factory state and write failures leave the in-memory state in place.
    Not thread-safe.
    """

    def __init__(self, store: KeyValueStore, catalog: ServerCatalog | None = None):
        self.store = store
        self.catalog = catalog if catalog is not None else load_catalog()
        self._builtin: tuple[LoginServer, ...] = tuple(self.catalog.servers)
        self._custom: list[LoginServer] = self._load_custom_servers()
        self._selected: LoginServer = self._load_selected_server()

    def get_login_servers(self) -> list[LoginServer]:
        return [*self._builtin, *self._custom]

    def get_custom_login_servers(self) -> list[LoginServer]:
        return list(self._custom)

    def get_default_login_server(self) -> LoginServer:
        return self._builtin[0]

    def get_login_server_from_url(self, url: str) -> LoginServer | None:
        """Return the first server whose URL matches exactly, or None."""
        for server in self.get_login_servers():
            if server.url == url:
                return server
        return None

    def get_selected_login_server(self) -> LoginServer:
        return self._selected

    def set_selected_login_server(self, server: LoginServer) -> None:
        self._selected = server
        logger.debug("Selected login server %s", server)
        self._write(lambda: self.store.put(SELECTED_URL_KEY, server.url))

    def add_custom_login_server(self, name: str, url: str) -> LoginServer:
        """
        Add a custom server and select it.
        Duplicate URLs are allowed; lookups resolve to the first match.
        """
        server = LoginServer(name=name, url=url, is_custom=True)
        if self.get_login_server_from_url(url) is not None:
            logger.debug("Adding login server with an already registered url %s", url)

        self._custom.append(server)
        pairs = [s.as_pair() for s in self._custom]
        self._write(lambda: self.store.put_pairs(CUSTOM_SERVERS_NAMESPACE, pairs))

        self.set_selected_login_server(server)
        return server

    def use_sandbox(self) -> None:
        self.set_selected_login_server(self.catalog.sandbox)

    def reset(self) -> None:
        """Forget all custom servers and select the default server again."""
        self._custom.clear()
        self._write(lambda: self.store.delete_pairs(CUSTOM_SERVERS_NAMESPACE))
        self.set_selected_login_server(self.get_default_login_server())

    def _load_custom_servers(self) -> list[LoginServer]:
        try:
            pairs = self.store.get_pairs(CUSTOM_SERVERS_NAMESPACE)
        except StorageError as e:
            logger.warning(f"Could not load custom login servers: {e}")
            return []
        return [LoginServer(name=name, url=url, is_custom=True) for name, url in pairs]

    def _load_selected_server(self) -> LoginServer:
        try:
            url = self.store.get(SELECTED_URL_KEY)
        except StorageError as e:
            logger.warning(f"Could not load selected login server: {e}")
            url = None

        if url is None:
            return self.get_default_login_server()

        server = self.get_login_server_from_url(url)
        if server is None:
            logger.warning(f"Persisted login server {url} is no longer available")
            return self.get_default_login_server()
        return server

    def _write(self, op: Callable[[], None]) -> None:
        try:
            op()
        except StorageError as e:
            logger.warning(f"Could not persist login server state: {e}")
