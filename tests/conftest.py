"""Shared fixtures: an in-memory stand-in for CredentialClient."""

from __future__ import annotations

import asyncio

import pytest

from gpass.config import GPassConfig
from gpass.models import Credential, NewCredential


class FakeCredentialClient:
    """Behaves like CredentialClient against an in-memory store.

    ``gate`` holds list() calls until set; ``list_error``/``create_error``
    make the next calls fail. ``max_active`` records list() overlap.
    """

    def __init__(self, logins: list[Credential] | None = None):
        self.logins = list(logins or [])
        self.gate: asyncio.Event | None = None
        self.list_error: Exception | None = None
        self.create_error: Exception | None = None
        self.list_calls = 0
        self.searches: list[str] = []
        self.active = 0
        self.max_active = 0
        self._next_id = 100
        self.config = GPassConfig()
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True

    async def list(self) -> tuple[Credential, ...]:
        self.list_calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.list_error is not None:
                raise self.list_error
            return tuple(self.logins)
        finally:
            self.active -= 1

    async def list_by_key(self, key: str) -> tuple[Credential, ...]:
        self.searches.append(key)
        if self.list_error is not None:
            raise self.list_error
        return tuple(c for c in self.logins if key in c.url)

    async def create(self, record: NewCredential) -> Credential:
        if self.create_error is not None:
            raise self.create_error
        created = Credential(
            ID=self._next_id,
            URL=record.url,
            Username=record.username,
            Password=record.password.get_secret_value() or "generated",
        )
        self._next_id += 1
        self.logins.append(created)
        return created


def login(id: int, url: str, username: str = "user", password: str = "pw") -> Credential:
    return Credential(ID=id, URL=url, Username=username, Password=password)


@pytest.fixture
def logins() -> list[Credential]:
    return [
        login(1, "https://github.com/login", "octocat"),
        login(2, "https://mail.example.com", "alice"),
        login(3, "http://Bank.example.org/signin", "bob"),
    ]


@pytest.fixture
def fake_client(logins) -> FakeCredentialClient:
    return FakeCredentialClient(logins)
