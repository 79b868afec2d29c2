"""Event subscriptions that do not keep subscribers alive.

A long-lived publisher holding ``obj.method`` in a plain list keeps ``obj``
reachable for as long as the publisher lives. :class:`WeakEvent` stores each
handler through a weak reference instead and checks it before every call,
so a subscriber that goes away simply stops being notified.

Subscribers that want deterministic teardown close the :class:`Subscription`
returned by :meth:`WeakEvent.subscribe`.

Note that a lambda or closure passed directly is only referenced by the
event and is collected straight away; keep a reference to it, or subscribe
a bound method.
"""
from __future__ import annotations
import logging
import weakref
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class WeakEventHandler:
    def __init__(self, callback: Callable[..., Any], on_dead: Optional[Callable[[WeakEventHandler], None]] = None) -> None:
        def _collected(_ref, self_ref=weakref.ref(self)):
            handler = self_ref()
            if handler is not None and handler._on_dead is not None:
                handler._on_dead(handler)

        self._on_dead = on_dead
        if hasattr(callback, '__self__') and hasattr(callback, '__func__'):
            self._ref = weakref.WeakMethod(callback, _collected)
        else:
            # TypeError for objects without weakref support (e.g. builtins)
            self._ref = weakref.ref(callback, _collected)
        self.name = getattr(callback, '__qualname__', repr(callback))

    def target(self) -> Optional[Callable[..., Any]]:
        return self._ref()

    @property
    def is_alive(self) -> bool:
        return self._ref() is not None

    def matches(self, callback: Callable[..., Any]) -> bool:
        target = self._ref()
        return target is not None and target == callback

    def __call__(self, *args, **kwargs) -> bool:
        target = self._ref()
        if target is None:
            return False
        target(*args, **kwargs)
        return True

    def __repr__(self) -> str:
        state = 'alive' if self.is_alive else 'dead'
        return f"<WeakEventHandler {self.name} ({state})>"


class Subscription:
    def __init__(self, event: WeakEvent, handler: WeakEventHandler) -> None:
        self._event = event
        self.handler = handler
        self.closed = False

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._event._remove(self.handler)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class WeakEvent:
    """Publisher-side handler list holding subscribers weakly."""

    def __init__(self, name: str = 'event') -> None:
        self.name = name
        self._handlers: List[WeakEventHandler] = []

    def subscribe(self, callback: Callable[..., Any]) -> Subscription:
        for handler in list(self._handlers):
            if handler.matches(callback):
                raise ValueError(f"{handler.name} is already subscribed to {self.name}")
        handler = WeakEventHandler(callback, on_dead=self._remove)
        self._handlers.append(handler)
        logger.debug("%s: subscribed %s", self.name, handler.name)
        return Subscription(self, handler)

    def unsubscribe(self, callback: Callable[..., Any]) -> bool:
        for handler in list(self._handlers):
            if handler.matches(callback):
                self._remove(handler)
                return True
        return False

    def _remove(self, handler: WeakEventHandler) -> None:
        try:
            self._handlers.remove(handler)
        except ValueError:
            return
        logger.debug("%s: dropped %r", self.name, handler)

    def emit(self, *args, **kwargs) -> int:
        delivered = 0
        for handler in list(self._handlers):
            if handler(*args, **kwargs):
                delivered += 1
            else:
                self._remove(handler)
        return delivered

    def clear(self) -> None:
        self._handlers.clear()

    def __len__(self) -> int:
        return sum(1 for h in list(self._handlers) if h.is_alive)

    def __repr__(self) -> str:
        return f"<WeakEvent {self.name} handlers={len(self)}>"
