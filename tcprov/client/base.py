"""Abstract base class for CI server clients."""

from abc import ABC, abstractmethod

from tcprov.models import Lookup


class CIClient(ABC):
    @abstractmethod
    def get(self, path: str) -> Lookup: ...

    @abstractmethod
    def post(self, path: str, body: dict) -> dict | str | None: ...

    @abstractmethod
    def put(self, path: str, body: dict | str, content_type: str = "application/json") -> dict | str | None: ...
