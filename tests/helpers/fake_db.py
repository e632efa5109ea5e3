"""Scripted stand-in for an async_sessionmaker in adapter unit tests.

Each execute() pops the next scripted response: a list of row dicts, or an
exception to raise. Executed SQL and parameters are recorded for assertions.
"""

from __future__ import annotations

from collections import deque
from typing import Any


class FakeMappings:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self._rows = rows

    def first(self) -> dict[str, Any] | None:
        return self._rows[0] if self._rows else None

    def one(self) -> dict[str, Any]:
        if len(self._rows) != 1:
            raise AssertionError(f"expected exactly one row, got {len(self._rows)}")
        return self._rows[0]

    def all(self) -> list[dict[str, Any]]:
        return list(self._rows)


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self._rows = rows

    def mappings(self) -> FakeMappings:
        return FakeMappings(self._rows)


class _Transaction:
    def __init__(self, session: FakeSession) -> None:
        self._session = session

    async def __aenter__(self) -> None:
        self._session.transactions += 1

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self._session.commits += 1
        return False


class FakeSession:
    def __init__(self, factory: FakeSessionFactory) -> None:
        self._factory = factory
        self.transactions = 0
        self.commits = 0

    async def __aenter__(self) -> FakeSession:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False

    def begin(self) -> _Transaction:
        return _Transaction(self)

    async def execute(self, statement: Any, params: dict[str, Any] | None = None):
        self._factory.executed.append((str(statement), params or {}))
        if not self._factory.responses:
            return FakeResult([])
        response = self._factory.responses.popleft()
        if isinstance(response, BaseException):
            raise response
        return FakeResult(response)


class FakeSessionFactory:
    """Callable returning FakeSessions that share one response script.

    Attributes:
        executed: (sql, params) for every execute() call, in order.
        sessions: Every session handed out.
    """

    def __init__(self, *responses: list[dict[str, Any]] | BaseException) -> None:
        self.responses: deque = deque(responses)
        self.executed: list[tuple[str, dict[str, Any]]] = []
        self.sessions: list[FakeSession] = []

    def __call__(self) -> FakeSession:
        session = FakeSession(self)
        self.sessions.append(session)
        return session

    @property
    def commits(self) -> int:
        return sum(session.commits for session in self.sessions)
