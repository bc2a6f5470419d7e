"""
In-process document store for itinerary and user records.

This is the canonical store the caches sit in front of. Documents are
deep-copied on the way in and out so no caller holds a reference into it.
"""

import copy
from typing import Any, Callable, Dict, List, Optional

from shared.logging import get_logger

Document = Dict[str, Any]
Predicate = Callable[[Document], bool]


class DocumentStore:
    """Async collection of documents keyed by their ``id`` field."""

    def __init__(self, collection: str):
        self.collection = collection
        self.logger = get_logger(f"itineraries.persistence.{collection}")
        self._documents: Dict[str, Document] = {}
        self._running = False

    async def start(self):
        """Start the persistence layer."""
        self._running = True
        self.logger.info("Document store started", collection=self.collection)

    async def stop(self):
        """Stop the persistence layer."""
        self._running = False
        self.logger.info("Document store stopped", collection=self.collection)

    async def health_check(self) -> bool:
        return self._running

    async def insert(self, document: Document) -> Document:
        doc_id = document["id"]
        if doc_id in self._documents:
            raise KeyError(f"Duplicate id in {self.collection}: {doc_id}")
        self._documents[doc_id] = copy.deepcopy(document)
        return copy.deepcopy(document)

    async def get(self, doc_id: str) -> Optional[Document]:
        document = self._documents.get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    async def replace(self, doc_id: str, document: Document) -> bool:
        if doc_id not in self._documents:
            return False
        self._documents[doc_id] = copy.deepcopy(document)
        return True

    async def delete(self, doc_id: str) -> bool:
        return self._documents.pop(doc_id, None) is not None

    async def find(
        self,
        predicate: Optional[Predicate] = None,
        *,
        sort_field: Optional[str] = None,
        descending: bool = False,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """Return matching documents, sorted then sliced."""
        matches = [doc for doc in self._documents.values() if predicate is None or predicate(doc)]
        if sort_field:
            # Missing values sort first ascending, last descending.
            matches.sort(
                key=lambda doc: (doc.get(sort_field) is not None, doc.get(sort_field)),
                reverse=descending,
            )
        end = None if limit is None else skip + limit
        return [copy.deepcopy(doc) for doc in matches[skip:end]]

    async def count(self, predicate: Optional[Predicate] = None) -> int:
        return sum(1 for doc in self._documents.values() if predicate is None or predicate(doc))
