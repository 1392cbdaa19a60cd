from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any, Protocol

ChangeHandler = Callable[[set[Path]], Coroutine[Any, Any, None]]


class FileWatcherPort(Protocol):
    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    async def wait(self) -> None: ...
