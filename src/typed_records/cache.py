"""Memoizing cache that computes each key at most once."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LoadingCache(Generic[K, V]):
    """Lazily computes and keeps one value per key.

    The first caller for a key runs the loader; concurrent callers for the
    same key wait on that computation and observe the same result. Entries
    are never evicted. A loader that raises an ``Exception`` is remembered
    too: later calls re-raise the same error without loading again.
    """

    def __init__(self, loader: Callable[[K], V]) -> None:
        self._loader = loader
        self._entries: dict[K, Future[V]] = {}
        self._lock = threading.Lock()

    def get(self, key: K) -> V:
        """Return the value for ``key``, loading it on first use."""
        with self._lock:
            future = self._entries.get(key)
            is_owner = future is None
            if is_owner:
                future = Future()
                self._entries[key] = future

        if is_owner:
            self._load(key, future)
        return future.result()

    def _load(self, key: K, future: Future[V]) -> None:
        try:
            value = self._loader(key)
        except Exception as exc:
            future.set_exception(exc)
        except BaseException as exc:
            # Interrupts are not remembered; the next caller loads again.
            with self._lock:
                del self._entries[key]
            future.set_exception(exc)
            raise
        else:
            future.set_result(value)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
