"""Save handle that forwards to a store's persistence call."""
from typing import Callable

from datastore.abstractions import SaveHandle


class DelegatingSaveHandle(SaveHandle):
    def __init__(self, save: Callable[[], int]):
        self._save = save

    def save(self) -> int:
        return int(self._save())

    def __repr__(self) -> str:
        target = getattr(self._save, "__qualname__", repr(self._save))
        return f"<DelegatingSaveHandle -> {target}>"
