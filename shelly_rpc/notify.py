"""Routing of device notifications to registered handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .const import JsonVal
from .envelope import Notification

_LOGGER = logging.getLogger(__name__)

GlobalHandler = Callable[[str, JsonVal], None]
MethodHandler = Callable[[JsonVal], None]


class NotificationRouter:
    """Dispatches notifications to global and per-method handlers.

    Handlers run synchronously in registration order, global handlers first.
    A failing handler is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._handlers: list[GlobalHandler] = []
        self._method_handlers: dict[str, list[MethodHandler]] = {}

    def on_notification(self, handler: GlobalHandler) -> None:
        """Register a handler called as handler(method, params) for every notification."""
        self._handlers.append(handler)

    def on_notification_method(self, method: str, handler: MethodHandler) -> None:
        """Register a handler called as handler(params) for one method."""
        if not method:
            raise ValueError("method must not be empty")
        self._method_handlers.setdefault(method, []).append(handler)

    def remove_notification_handlers(self) -> None:
        self._handlers.clear()

    def remove_method_handlers(self, method: str) -> None:
        self._method_handlers.pop(method, None)

    def remove_all_handlers(self) -> None:
        self._handlers.clear()
        self._method_handlers.clear()

    @property
    def handler_count(self) -> int:
        return len(self._handlers) + sum(len(h) for h in self._method_handlers.values())

    @property
    def methods(self) -> list[str]:
        """Methods that have at least one handler."""
        return [method for method, handlers in self._method_handlers.items() if handlers]

    def has_handlers(self) -> bool:
        return self.handler_count > 0

    def route(self, notification: Notification) -> None:
        """Deliver a notification to every matching handler."""
        for handler in list(self._handlers):
            try:
                handler(notification.method, notification.params)
            except Exception:
                _LOGGER.exception("Notification handler failed for %s", notification.method)

        for method_handler in list(self._method_handlers.get(notification.method, ())):
            try:
                method_handler(notification.params)
            except Exception:
                _LOGGER.exception("Notification handler failed for %s", notification.method)
