from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

S = TypeVar("S")
D = TypeVar("D")


class Adapter(ABC, Generic[S, D]):
    """A single pipeline stage converting one value into the next."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def convert(self, src: S) -> D:
        ...


class AsyncAdapter(ABC, Generic[S, D]):
    """A pipeline stage that may suspend on I/O before producing its output."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def convert(self, src: S) -> D:
        ...
