"""Actor identity for ledger operations."""

from typing import Protocol

from syndic.services.errors import AuthenticationError


class ActorProvider(Protocol):
    """Gives the id of the authenticated user performing an operation."""

    def current_actor_id(self) -> str | None: ...


class StaticActorProvider:
    """Actor provider bound to one user id (None means anonymous)."""

    def __init__(self, actor_id: str | None) -> None:
        self.actor_id = actor_id

    def current_actor_id(self) -> str | None:
        return self.actor_id


def require_actor(provider: ActorProvider) -> str:
    """Return the current actor id.

    Raises:
        AuthenticationError: If nobody is authenticated
    """
    actor_id = provider.current_actor_id()
    if not actor_id:
        raise AuthenticationError()
    return actor_id


__all__ = ["ActorProvider", "StaticActorProvider", "require_actor"]
