# core/mongo_store.py

import asyncio
import uuid
from typing import List, Optional, Sequence

from pymongo import AsyncMongoClient, ASCENDING, DESCENDING
from pymongo.errors import OperationFailure, PyMongoError

from .config import settings
from .errors import DocumentNotFoundError
from .store import DocumentStore, OnAdded, OrderBy, Predicate, Record, Subscription

_MONGO_OPS = {
    "==": "$eq",
    "<": "$lt",
    "<=": "$lte",
    ">": "$gt",
    ">=": "$gte",
    # Mongo matches array fields element-wise, so $in behaves as "contains any"
    "array-contains-any": "$in",
}

# CappedPositionLost, ChangeStreamFatalError, ChangeStreamHistoryLost: the resume token is unusable
_UNRESUMABLE_CODES = {136, 280, 286}


def to_mongo_filter(predicates: Sequence[Predicate], prefix: str = "") -> dict:
    """Translates predicates into a Mongo filter document."""
    query: dict = {}
    for p in predicates:
        value = list(p.value) if p.op == "array-contains-any" else p.value
        query.setdefault(prefix + p.field, {})[_MONGO_OPS[p.op]] = value
    return query


def _to_record(doc: Optional[dict]) -> Optional[Record]:
    if doc is None:
        return None
    doc["id"] = str(doc.pop("_id"))
    return doc


class _ChangeStreamSubscription(Subscription):
    def __init__(self, task: asyncio.Task):
        self.task = task

    async def close(self) -> None:
        if not self.task.done():
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass


class MongoStore(DocumentStore):
    """DocumentStore backed by MongoDB. Keys are stored as string _id values."""

    def __init__(self, db_name: Optional[str] = None, uri: Optional[str] = None, retry_delay: float = 5.0):
        self.client = AsyncMongoClient(uri or settings.final_mongo_uri, tz_aware=True)
        self.db = self.client[db_name or settings.db_name]
        self.retry_delay = retry_delay
        print("---MONGO STORE: Connected to MongoDB---")

    async def get(self, collection: str, key: str) -> Optional[Record]:
        return _to_record(await self.db[collection].find_one({"_id": key}))

    async def put(self, collection: str, key: str, doc: Record) -> None:
        body = {k: v for k, v in doc.items() if k != "id"}
        await self.db[collection].replace_one({"_id": key}, body, upsert=True)

    async def patch(self, collection: str, key: str, fields: Record) -> None:
        result = await self.db[collection].update_one({"_id": key}, {"$set": fields})
        if result.matched_count == 0:
            raise DocumentNotFoundError(collection, key)

    async def append(self, collection: str, doc: Record) -> str:
        key = uuid.uuid4().hex
        body = {k: v for k, v in doc.items() if k != "id"}
        body["_id"] = key
        await self.db[collection].insert_one(body)
        return key

    async def query(
        self,
        collection: str,
        predicates: Sequence[Predicate] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Record]:
        cursor = self.db[collection].find(to_mongo_filter(predicates))
        if order_by:
            cursor = cursor.sort(order_by.field, DESCENDING if order_by.descending else ASCENDING)
        if limit is not None:
            cursor = cursor.limit(limit)
        return [_to_record(doc) for doc in await cursor.to_list(length=None)]

    async def subscribe(self, collection: str, predicates: Sequence[Predicate], on_added: OnAdded) -> Subscription:
        match = {"operationType": "insert"}
        match.update(to_mongo_filter(predicates, prefix="fullDocument."))
        pipeline = [{"$match": match}]
        task = asyncio.create_task(self._watch(collection, pipeline, on_added))
        return _ChangeStreamSubscription(task)

    async def _watch(self, collection: str, pipeline: list, on_added: OnAdded) -> None:
        """Follows a change stream until cancelled. Stream errors are logged and the watch restarts."""
        resume_token = None
        while True:
            try:
                stream = await self.db[collection].watch(pipeline, resume_after=resume_token)
                async with stream:
                    async for change in stream:
                        resume_token = change["_id"]
                        try:
                            await on_added(_to_record(change["fullDocument"]))
                        except Exception as e:
                            print(f"---MONGO STORE: Subscriber on '{collection}' failed: {type(e).__name__}: {e}---")
            except OperationFailure as e:
                if e.code in _UNRESUMABLE_CODES:
                    print(f"---MONGO STORE: Resume point for '{collection}' lost, restarting from now---")
                    resume_token = None
                else:
                    print(f"---MONGO STORE: Change stream on '{collection}' errored: {e}. Retrying in {self.retry_delay}s---")
                await asyncio.sleep(self.retry_delay)
            except PyMongoError as e:
                print(f"---MONGO STORE: Change stream on '{collection}' errored: {e}. Retrying in {self.retry_delay}s---")
                await asyncio.sleep(self.retry_delay)

    async def close(self) -> None:
        await self.client.close()
        print("---MONGO STORE: Connection closed---")
