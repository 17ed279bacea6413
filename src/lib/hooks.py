"""
Build lifecycle hooks

Callbacks are registered for an (owner, event) pair and fired by the site
build at documented points. Return values are ignored; exceptions are not
caught, so a failing callback aborts the build.

Usage:
    from lexalias.lib.hooks import HookRegistry
    from lexalias.models import HookOwner, HookEvent

    def announce(site):
        print(f"rendering {len(site.pages)} pages")

    hooks = HookRegistry()
    hooks.register(HookOwner.SITE, HookEvent.PRE_RENDER, announce)
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

from ..models.hooks import HookOwner, HookEvent, HookPriority, OWNER_EVENTS
from .log import LOG


class HookError(Exception):
    """Raised when a hook registration is invalid"""
    pass


@dataclass
class HookEntry:
    """A registered callback with its ordering keys"""
    callback: Callable[..., Any]
    priority: HookPriority
    sequence: int


class HookRegistry:
    """Callbacks per (owner, event), ordered by priority then registration order"""

    def __init__(self) -> None:
        self.entries: Dict[Tuple[HookOwner, HookEvent], List[HookEntry]] = {}
        self.sequence = 0

    def register(
        self,
        owner: HookOwner,
        event: HookEvent,
        callback: Callable[..., Any],
        priority: HookPriority = HookPriority.NORMAL,
    ) -> Callable[..., Any]:
        """
        Register `callback` to run when `owner` reaches `event`

        Returns the callback so this can be used from a decorator.

        Raises:
            HookError: the owner has no such event, or callback is not callable
        """
        if event not in OWNER_EVENTS[owner]:
            raise HookError(f"Owner '{owner.value}' has no event '{event.value}'")
        if not callable(callback):
            raise HookError(f"Hook for {owner.value}:{event.value} is not callable: {callback!r}")

        self.entries.setdefault((owner, event), []).append(
            HookEntry(callback=callback, priority=priority, sequence=self.sequence)
        )
        self.sequence += 1
        return callback

    def on(
        self, owner: HookOwner, event: HookEvent, priority: HookPriority = HookPriority.NORMAL
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of register()"""
        def decorator(callback: Callable[..., Any]) -> Callable[..., Any]:
            return self.register(owner, event, callback, priority)
        return decorator

    def callbacks_get(self, owner: HookOwner, event: HookEvent) -> List[Callable[..., Any]]:
        """Callbacks for (owner, event) in the order they will run"""
        entries = sorted(
            self.entries.get((owner, event), []),
            key=lambda entry: (-entry.priority.value, entry.sequence),
        )
        return [entry.callback for entry in entries]

    def trigger(self, owner: HookOwner, event: HookEvent, *args: Any) -> None:
        """Run every callback for (owner, event) with `args`"""
        callbacks = self.callbacks_get(owner, event)
        if callbacks:
            LOG(f"Firing {len(callbacks)} hook(s) for {owner.value}:{event.value}", level=3)
        for callback in callbacks:
            callback(*args)

    def clear(self) -> None:
        """Forget every registered callback"""
        self.entries.clear()

