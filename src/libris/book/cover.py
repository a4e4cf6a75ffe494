# ABOUTME: Three-state cover cache cell: unresolved, resolved-absent, resolved-present.
# ABOUTME: A present cover is held weakly so it can be reclaimed and decoded again later.

import threading
import weakref
from collections.abc import Callable

from libris.book.types import CoverImage

_UNRESOLVED = object()
_ABSENT = object()


class CoverCache:
    """Caches the outcome of a cover lookup.

    Resolution runs under a lock, so concurrent callers share one decode.
    The loader returns a CoverImage or None; None is cached as "absent" and
    never retried until invalidate() is called.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state: object = _UNRESOLVED

    def get(self, loader: Callable[[], CoverImage | None]) -> CoverImage | None:
        with self._lock:
            state = self._state
            if state is _ABSENT:
                return None
            if isinstance(state, weakref.ref):
                image = state()
                if image is not None:
                    return image

            image = loader()
            self._state = weakref.ref(image) if image is not None else _ABSENT
            return image

    def invalidate(self) -> None:
        with self._lock:
            self._state = _UNRESOLVED

    @property
    def is_resolved(self) -> bool:
        return self._state is not _UNRESOLVED

    @property
    def is_absent(self) -> bool:
        return self._state is _ABSENT
