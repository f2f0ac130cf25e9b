"""Async action/filter hooks around asset and comment operations.

Actions run callbacks for side effects (audit trails, notifications);
filters pass a value through callbacks that may replace it.

Usage:
    from inkpost.lib.hooks import hooks, action, AFTER_ASSET_DELETE

    @action(AFTER_ASSET_DELETE)
    async def audit_delete(asset):
        ...

    folder = await hooks.apply_filters(ASSET_UPLOAD_FOLDER, "inkpost/assets", owner_id=user_id)
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from inkpost.lib.observability import span

T = TypeVar("T")


@dataclass(order=True)
class HookHandler:
    """A registered hook handler with priority."""

    priority: int
    callback: Callable = field(compare=False)

    async def call(self, *args: Any, **kwargs: Any) -> Any:
        """Call the handler, handling both sync and async callbacks."""
        result = self.callback(*args, **kwargs)
        if asyncio.iscoroutine(result):
            return await result
        return result


class HookRegistry:
    """Registry of action and filter handlers, ordered by priority."""

    def __init__(self) -> None:
        self._actions: dict[str, list[HookHandler]] = defaultdict(list)
        self._filters: dict[str, list[HookHandler]] = defaultdict(list)

    def add_action(self, hook_name: str, callback: Callable[..., Any], priority: int = 10) -> None:
        """Register an action callback. Lower priorities run first."""
        self._actions[hook_name].append(HookHandler(priority=priority, callback=callback))
        self._actions[hook_name].sort()

    def add_filter(self, hook_name: str, callback: Callable[..., T], priority: int = 10) -> None:
        """Register a filter callback. Lower priorities run first."""
        self._filters[hook_name].append(HookHandler(priority=priority, callback=callback))
        self._filters[hook_name].sort()

    def remove_action(self, hook_name: str, callback: Callable[..., Any]) -> bool:
        return self._remove(self._actions, hook_name, callback)

    def remove_filter(self, hook_name: str, callback: Callable[..., Any]) -> bool:
        return self._remove(self._filters, hook_name, callback)

    @staticmethod
    def _remove(table: dict[str, list[HookHandler]], hook_name: str, callback: Callable) -> bool:
        handlers = table.get(hook_name, [])
        for i, handler in enumerate(handlers):
            if handler.callback is callback:
                handlers.pop(i)
                return True
        return False

    def has_action(self, hook_name: str) -> bool:
        return bool(self._actions.get(hook_name))

    def has_filter(self, hook_name: str) -> bool:
        return bool(self._filters.get(hook_name))

    async def do_action(self, hook_name: str, *args: Any, **kwargs: Any) -> None:
        """Execute all registered action callbacks."""
        with span(f"hook.action:{hook_name}", hook_name=hook_name):
            for handler in self._actions.get(hook_name, []):
                await handler.call(*args, **kwargs)

    async def apply_filters(self, hook_name: str, value: T, *args: Any, **kwargs: Any) -> T:
        """Pass ``value`` through every registered filter and return the result."""
        with span(f"hook.filter:{hook_name}", hook_name=hook_name):
            for handler in self._filters.get(hook_name, []):
                value = await handler.call(value, *args, **kwargs)
            return value

    def clear(self) -> None:
        """Clear all registered hooks. Useful for testing."""
        self._actions.clear()
        self._filters.clear()


hooks = HookRegistry()


def action(hook_name: str, priority: int = 10) -> Callable[[Callable], Callable]:
    """Decorator registering a function as an action handler."""

    def decorator(func: Callable) -> Callable:
        hooks.add_action(hook_name, func, priority)
        return func

    return decorator


def filter(hook_name: str, priority: int = 10) -> Callable[[Callable], Callable]:
    """Decorator registering a function as a filter handler."""

    def decorator(func: Callable) -> Callable:
        hooks.add_filter(hook_name, func, priority)
        return func

    return decorator


# Actions
AFTER_ASSET_UPLOAD = "after_asset_upload"
AFTER_ASSET_REPLACE = "after_asset_replace"
AFTER_ASSET_DELETE = "after_asset_delete"
AFTER_COMMENT_CREATE = "after_comment_create"
AFTER_COMMENT_MODERATE = "after_comment_moderate"

# Filters
ASSET_UPLOAD_FOLDER = "asset_upload_folder"
