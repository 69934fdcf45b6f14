# core/in_memory_store.py

import copy
import uuid
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from .errors import DocumentNotFoundError
from .store import DocumentStore, OnAdded, OrderBy, Predicate, Record, Subscription, matches_all


class _MemorySubscription(Subscription):
    def __init__(self, store: "InMemoryStore", collection: str, predicates: Sequence[Predicate], on_added: OnAdded):
        self.store = store
        self.collection = collection
        self.predicates = tuple(predicates)
        self.on_added = on_added
        self.active = True

    async def close(self) -> None:
        if self.active:
            self.active = False
            self.store._subscriptions[self.collection].remove(self)


class InMemoryStore(DocumentStore):
    """A process-local DocumentStore for tests and offline runs."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Record]] = defaultdict(dict)
        self._subscriptions: Dict[str, List[_MemorySubscription]] = defaultdict(list)

    async def get(self, collection: str, key: str) -> Optional[Record]:
        doc = self._collections[collection].get(key)
        return copy.deepcopy(doc) if doc is not None else None

    async def put(self, collection: str, key: str, doc: Record) -> None:
        stored = copy.deepcopy(doc)
        stored["id"] = key
        self._collections[collection][key] = stored

    async def patch(self, collection: str, key: str, fields: Record) -> None:
        doc = self._collections[collection].get(key)
        if doc is None:
            raise DocumentNotFoundError(collection, key)
        doc.update(copy.deepcopy(fields))

    async def append(self, collection: str, doc: Record) -> str:
        key = uuid.uuid4().hex
        await self.put(collection, key, doc)
        added = self._collections[collection][key]
        # Snapshot the list: a callback may close its own subscription
        for sub in list(self._subscriptions[collection]):
            if sub.active and matches_all(added, sub.predicates):
                try:
                    await sub.on_added(copy.deepcopy(added))
                except Exception as e:
                    print(f"---IN-MEMORY STORE: Subscriber on '{collection}' failed: {type(e).__name__}: {e}---")
        return key

    async def query(
        self,
        collection: str,
        predicates: Sequence[Predicate] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Record]:
        docs = [d for d in self._collections[collection].values() if matches_all(d, predicates)]
        if order_by:
            docs = [d for d in docs if order_by.field in d]
            docs.sort(key=lambda d: d[order_by.field], reverse=order_by.descending)
        if limit is not None:
            docs = docs[:limit]
        return copy.deepcopy(docs)

    async def subscribe(self, collection: str, predicates: Sequence[Predicate], on_added: OnAdded) -> Subscription:
        sub = _MemorySubscription(self, collection, predicates, on_added)
        self._subscriptions[collection].append(sub)
        return sub
