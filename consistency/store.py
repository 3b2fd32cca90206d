# consistency/store.py - Thread-safe score registry
import threading
from typing import Any, Dict, Hashable, Iterator, List, Mapping, Tuple

from consistency.schemas import DEFAULT_SCORE, ScoreEntry


class ScoreStore:
    """
    Maps tracked entities to their ScoreEntry.

    All access goes through one lock, so add/remove/query are safe from
    several threads. Unknown entities read as DEFAULT_SCORE.
    """

    def __init__(self):
        self._data: Dict[Hashable, ScoreEntry] = {}
        self._lock = threading.Lock()

    def add(self, entity: Hashable) -> bool:
        """Track an entity with the default score. Returns False if already tracked."""
        with self._lock:
            if entity in self._data:
                return False
            self._data[entity] = DEFAULT_SCORE
            return True

    def remove(self, entity: Hashable) -> bool:
        with self._lock:
            return self._data.pop(entity, None) is not None

    def get(self, entity: Hashable) -> ScoreEntry:
        with self._lock:
            return self._data.get(entity, DEFAULT_SCORE)

    def update_tracked(self, scores: Mapping[Any, ScoreEntry]) -> int:
        """
        Store scores for entities that are still tracked.

        Entities removed since the scores were computed are skipped.
        Returns the number of entries written.
        """
        written = 0
        with self._lock:
            for entity, entry in scores.items():
                if entity in self._data:
                    self._data[entity] = entry
                    written += 1
        return written

    def snapshot(self) -> List[Hashable]:
        """Tracked entities in a fixed order, valid until the next mutation."""
        with self._lock:
            return list(self._data)

    def items(self) -> List[Tuple[Hashable, ScoreEntry]]:
        with self._lock:
            return list(self._data.items())

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __contains__(self, entity: Hashable) -> bool:
        with self._lock:
            return entity in self._data

    def __len__(self):
        with self._lock:
            return len(self._data)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.snapshot())

    def __repr__(self):
        return f"ScoreStore({dict(self.items())})"
