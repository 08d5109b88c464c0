"""
Authorization - Capability check run before any lifecycle call touches state.

Signature verification itself is external. The engine only asks:
"has this player authorized this call (with these arguments)?"

Implementations:
- AllowAllAuthorizer: development and tests
- CallerAuthorizer: binds the authenticated caller for one request and
  rejects calls that act for a different player
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

from ..engine_core.errors import NotAuthorized


class Authorizer(ABC):
    """Authorization capability."""

    @abstractmethod
    def require_auth(self, player: str, args: tuple[Any, ...] = ()):
        """Raise NotAuthorized unless player authorized this call."""


class AllowAllAuthorizer(Authorizer):
    """Every call is authorized."""

    def require_auth(self, player, args=()):
        return None


class CallerAuthorizer(Authorizer):
    """
    Authorizes calls made by the caller bound to the current context.

    Usage:
        authorizer = CallerAuthorizer()
        with authorizer.authenticated_as("alice"):
            manager.attempt_exit("alice")   # ok
            manager.attempt_exit("bob")     # NotAuthorized
    """

    def __init__(self):
        self._caller: ContextVar[str | None] = ContextVar("sabirth_caller", default=None)

    @contextmanager
    def authenticated_as(self, caller: str | None) -> Iterator[None]:
        token = self._caller.set(caller)
        try:
            yield
        finally:
            self._caller.reset(token)

    @property
    def caller(self) -> str | None:
        return self._caller.get()

    def require_auth(self, player, args=()):
        caller = self._caller.get()
        if caller is None:
            raise NotAuthorized("No authenticated caller")
        if caller != player:
            raise NotAuthorized(f"Caller {caller} cannot act for {player}")
