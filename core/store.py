# core/store.py

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

Record = Dict[str, Any]
OnAdded = Callable[[Record], Awaitable[None]]

OPERATORS = ("==", "<", "<=", ">", ">=", "array-contains-any")


@dataclass(frozen=True)
class Predicate:
    """A single field condition, e.g. Predicate("farmer_id", "==", user_id)."""
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported operator '{self.op}'")

    def matches(self, record: Record) -> bool:
        if self.field not in record:
            return False
        actual = record[self.field]
        if self.op == "array-contains-any":
            if not isinstance(actual, (list, tuple)):
                return False
            return any(item in actual for item in self.value)
        try:
            if self.op == "==":
                return actual == self.value
            if self.op == "<":
                return actual < self.value
            if self.op == "<=":
                return actual <= self.value
            if self.op == ">":
                return actual > self.value
            return actual >= self.value
        except TypeError:
            # Mismatched types never satisfy a range condition
            return False


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


def matches_all(record: Record, predicates: Iterable[Predicate]) -> bool:
    return all(p.matches(record) for p in predicates)


class Subscription(ABC):
    """Handle for a live subscription. Closing it stops further callbacks."""

    @abstractmethod
    async def close(self) -> None:
        ...


class DocumentStore(ABC):
    """
    Document-oriented persistence used by handlers and background jobs.
    Every record returned carries its key under "id".
    """

    @abstractmethod
    async def get(self, collection: str, key: str) -> Optional[Record]:
        ...

    @abstractmethod
    async def put(self, collection: str, key: str, doc: Record) -> None:
        """Upsert: replaces the whole document stored under key."""

    @abstractmethod
    async def patch(self, collection: str, key: str, fields: Record) -> None:
        """Sets the given fields. Raises DocumentNotFoundError if key is absent."""

    @abstractmethod
    async def append(self, collection: str, doc: Record) -> str:
        """Inserts a new document and returns its generated id."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        predicates: Sequence[Predicate] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Record]:
        ...

    @abstractmethod
    async def subscribe(
        self,
        collection: str,
        predicates: Sequence[Predicate],
        on_added: OnAdded,
    ) -> Subscription:
        """Calls on_added for documents inserted after the subscription starts."""
