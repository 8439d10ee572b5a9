import time
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

V = TypeVar("V")


class TTLCache(Generic[V]):
    """
    Keyed cache invalidated purely by age. Owned by the engine instance that creates it;
    the clock is injectable so expiry can be driven in tests.
    """

    def __init__(self, ttl_s: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl_s
        self._clock = clock
        self._d: Dict[Hashable, Tuple[float, V]] = {}

    def get(self, key: Hashable) -> Optional[V]:
        entry = self._d.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl:
            self._d.pop(key, None)
            return None
        return value

    def set(self, key: Hashable, value: V) -> None:
        self._d[key] = (self._clock(), value)

    def pop(self, key: Hashable) -> None:
        self._d.pop(key, None)

    def __len__(self) -> int:
        return len(self._d)
