from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Optional

from journey_engine.contracts import MissionEvent, MissionEventKind

Listener = Callable[[MissionEvent], None]
Unsubscribe = Callable[[], None]


@dataclass(frozen=True, eq=False)
class _Subscription:
    listener: Listener
    kinds: Optional[frozenset[MissionEventKind]]

    def wants(self, event: MissionEvent) -> bool:
        return self.kinds is None or event.kind in self.kinds


class MissionEventChannel:
    """Synchronous fan-out of mission events in registration order."""

    def __init__(self) -> None:
        self._subscriptions: list[_Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, listener: Listener, kinds: Optional[Iterable[MissionEventKind]] = None) -> Unsubscribe:
        subscription = _Subscription(listener=listener, kinds=frozenset(kinds) if kinds is not None else None)
        self._subscriptions.append(subscription)

        def _unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return _unsubscribe

    def publish(self, event: MissionEvent) -> None:
        # snapshot so a listener may unsubscribe itself mid-dispatch
        for subscription in tuple(self._subscriptions):
            if subscription.wants(event):
                subscription.listener(event)
