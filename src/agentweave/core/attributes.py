"""Label sets computed once per monitored entity."""

from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import Generic, TypeVar

from agentweave.core.models import AttributeSet

E = TypeVar("E")


class AttributeCache(Generic[E]):
    """Index-aligned attribute sets for a fixed, ordered list of entities.

    Labels are built exactly once, when the cache is created. Entity order and
    identity are assumed stable for the lifetime of the cache; entities that
    appear or disappear later require a fresh cache.

    Example:
        ```python
        cache = AttributeCache(pools, lambda p: {"pool": p.name})
        cache[0]  # AttributeSet({'pool': 'eden'})
        ```
    """

    __slots__ = ("_entities", "_attributes")

    def __init__(
        self,
        entities: Sequence[E],
        labeler: Callable[[E], Mapping[str, str]],
    ) -> None:
        self._entities: tuple[E, ...] = tuple(entities)
        self._attributes: tuple[AttributeSet, ...] = tuple(
            AttributeSet(labeler(entity)) for entity in self._entities
        )

    @property
    def entities(self) -> tuple[E, ...]:
        return self._entities

    def __getitem__(self, index: int) -> AttributeSet:
        return self._attributes[index]

    def __len__(self) -> int:
        return len(self._attributes)

    def __iter__(self) -> Iterator[AttributeSet]:
        return iter(self._attributes)

    def pairs(self) -> Iterator[tuple[E, AttributeSet]]:
        """Yield each entity with its cached attribute set."""
        return zip(self._entities, self._attributes)
