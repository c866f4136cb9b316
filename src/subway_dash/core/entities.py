"""Fixed-capacity entity pools for track objects.

Obstacles and coins live in preallocated slots. A slot is either inactive
(its lane/depth are stale and must be ignored) or holds a live entity.
Allocation is a linear scan for the first free slot; nothing is ever
compacted or grown, so a full pool simply refuses new spawns.
"""

from dataclasses import dataclass
from typing import Callable, Generic, Iterator, List, Optional, TypeVar


@dataclass
class Obstacle:
    lane: int = 0
    depth: float = 0.0
    active: bool = False
    hit: bool = False  # Runner already ran into this one


@dataclass
class Coin:
    lane: int = 0
    depth: float = 0.0
    active: bool = False


E = TypeVar("E", Obstacle, Coin)


class EntityPool(Generic[E]):
    """Arena of reusable entity slots indexed by position."""

    def __init__(self, factory: Callable[[], E], capacity: int):
        self.capacity = capacity
        self._factory = factory
        self._slots: List[E] = [factory() for _ in range(capacity)]

    def __len__(self) -> int:
        return self.capacity

    def __iter__(self) -> Iterator[E]:
        return iter(self._slots)

    def __getitem__(self, index: int) -> E:
        return self._slots[index]

    def spawn(self, lane: int, depth: float) -> Optional[E]:
        """Claim the first inactive slot.

        Returns:
            The activated entity, or None when every slot is taken.
        """
        for index, slot in enumerate(self._slots):
            if not slot.active:
                # Fresh instance so no per-kind flags leak from the last tenant
                entity = self._factory()
                entity.lane = lane
                entity.depth = depth
                entity.active = True
                self._slots[index] = entity
                return entity
        return None

    def active(self) -> Iterator[E]:
        """Iterate live entities in pool order."""
        return (slot for slot in self._slots if slot.active)

    @property
    def active_count(self) -> int:
        return sum(1 for slot in self._slots if slot.active)

    @property
    def is_full(self) -> bool:
        return all(slot.active for slot in self._slots)

    def clear(self) -> None:
        """Release every slot."""
        for slot in self._slots:
            slot.active = False
