"""Bus d'évènements de la couche application.

Le service de simulation y publie le déroulé des épisodes; la GUI et
l'enregistreur de trajectoires s'y abonnent, éventuellement filtrés par type.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple, Type

Subscriber = Callable[[object], None]
_Entry = Tuple[Optional[type], Subscriber]


class EventBus:
    """Diffusion synchrone, dans l'ordre d'abonnement.

    Un abonné filtré par `event_type` ne reçoit que les instances de ce type
    (sous-classes comprises). Une exception levée par un abonné remonte à
    l'appelant de `publish` et interrompt la diffusion.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: List[_Entry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def subscribe(
        self,
        callback: Subscriber,
        event_type: Optional[Type[object]] = None,
    ) -> Callable[[], None]:
        """Abonne `callback`; retourne une fonction de désabonnement idempotente."""

        entry: _Entry = (event_type, callback)
        self._entries.append(entry)

        def unsubscribe() -> None:
            # Comparaison par identité: un même callback peut être abonné deux fois.
            for index, current in enumerate(self._entries):
                if current is entry:
                    del self._entries[index]
                    return

        return unsubscribe

    def publish(self, event: object) -> None:
        for event_type, callback in tuple(self._entries):
            if event_type is None or isinstance(event, event_type):
                callback(event)


__all__ = ["EventBus", "Subscriber"]
