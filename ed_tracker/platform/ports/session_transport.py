from typing import Protocol, runtime_checkable

@runtime_checkable
class SessionTransport(Protocol):
    async def send(self, message: dict) -> None: ...
    async def close(self, code: int = 1000) -> None: ...
