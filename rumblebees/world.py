"""World - entity ids and per-type component stores for bees, fights and spawn requests."""

from __future__ import annotations

from typing import Any, Generator, Iterable, TypeVar, cast

from rumblebees.types import DeadEntityError, EntityId

T = TypeVar("T")


class World:
    def __init__(self) -> None:
        self._components: dict[type, dict[int, Any]] = {}
        self._next_id: int = 0
        self._alive: set[int] = set()

    def spawn(self, *components: Any) -> EntityId:
        eid = self._next_id
        self._next_id += 1
        self._alive.add(eid)
        for component in components:
            self.attach(eid, component)
        return eid

    def despawn(self, entity_id: EntityId) -> None:
        self._alive.discard(entity_id)
        for store in self._components.values():
            store.pop(entity_id, None)

    def attach(self, entity_id: EntityId, component: Any) -> None:
        if entity_id not in self._alive:
            raise DeadEntityError(
                entity_id,
                f"Cannot attach {type(component).__name__} to dead entity {entity_id}",
            )
        self._components.setdefault(type(component), {})[entity_id] = component

    def detach(self, entity_id: EntityId, component_type: type) -> Any | None:
        """Remove and return a component. Missing components are ignored."""
        store = self._components.get(component_type)
        if store is None:
            return None
        return store.pop(entity_id, None)

    def get(self, entity_id: EntityId, component_type: type[T]) -> T:
        if entity_id not in self._alive:
            raise DeadEntityError(entity_id, f"Entity {entity_id} is not alive")
        store = self._components.get(component_type)
        if store is None or entity_id not in store:
            raise KeyError(
                f"Entity {entity_id} has no {component_type.__name__} component"
            )
        return cast(T, store[entity_id])

    def try_get(self, entity_id: EntityId, component_type: type[T]) -> T | None:
        if entity_id not in self._alive:
            return None
        store = self._components.get(component_type)
        if store is None:
            return None
        return cast("T | None", store.get(entity_id))

    def has(self, entity_id: EntityId, component_type: type) -> bool:
        if entity_id not in self._alive:
            return False
        store = self._components.get(component_type)
        return store is not None and entity_id in store

    def query(
        self, *required: type, without: Iterable[type] = ()
    ) -> Generator[tuple[EntityId, tuple[Any, ...]], None, None]:
        """Yield ``(eid, components)`` for entities holding every required type.

        Entities are visited in spawn order so systems iterate
        deterministically. Entities holding any type in ``without`` are
        skipped.
        """
        if not required:
            return
        base = self._components.get(required[0])
        if not base:
            return
        excluded = [self._components.get(ctype) for ctype in without]

        for eid in sorted(base):
            if eid not in self._alive:
                continue
            if any(store is not None and eid in store for store in excluded):
                continue
            components: list[Any] = []
            for ctype in required:
                store = self._components.get(ctype)
                if store is None or eid not in store:
                    break
                components.append(store[eid])
            else:
                yield eid, tuple(components)

    def count(self, component_type: type) -> int:
        store = self._components.get(component_type)
        if store is None:
            return 0
        return sum(1 for eid in store if eid in self._alive)

    def entities(self) -> frozenset[EntityId]:
        return frozenset(self._alive)

    def alive(self, entity_id: EntityId) -> bool:
        return entity_id in self._alive
