from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol


class SettingsRepo(Protocol):
    async def get_many(self, keys: Iterable[str]) -> dict[str, str]: ...
    async def put(self, key: str, value: str) -> None: ...


class InMemorySettingsRepo:
    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    async def get_many(self, keys: Iterable[str]) -> dict[str, str]:
        return {k: self._values[k] for k in keys if k in self._values}

    async def put(self, key: str, value: str) -> None:
        self._values[key] = value
