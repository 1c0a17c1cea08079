"""
Durable in-process store for registry resources.

``ResourceStore`` keeps every record in memory and mirrors each
mutation to a single JSON document on disk.  The store initialises
itself lazily: the first operation loads the backing file, creating it
(and its directory) with an empty collection when it does not exist
yet.  A file that exists but cannot be parsed is a fatal error; the
store refuses to start over it rather than silently discarding data.

Every operation, initialisation included, runs under one
``asyncio.Lock``, so concurrent requests never observe a collection
mid-mutation and never interleave their file writes.

Mutations follow a persist-before-commit discipline: the next state of
the collection is built aside, written to disk, and only then swapped
in.  If the write fails the in-memory collection is left exactly as it
was and the error propagates to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from ..core.errors import PersistenceError, StoreCorruptedError
from ..schemas.resource import (
    Resource,
    ResourceCreate,
    ResourceDocument,
    ResourceFilters,
    ResourceUpdate,
)


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResourceStore:
    """Owns the resource collection and its backing file."""

    def __init__(self, file_path: str | os.PathLike) -> None:
        self.file_path = Path(file_path)
        self._resources: Dict[str, Resource] = {}
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------
    async def init(self) -> None:
        """Load the backing file once.  Later calls are no-ops."""
        async with self._lock:
            await self._ensure_initialized()

    async def _ensure_initialized(self) -> None:
        # Callers must hold self._lock.
        if self._initialized:
            return
        try:
            raw = await asyncio.to_thread(self.file_path.read_bytes)
        except FileNotFoundError:
            logger.info("No data file at %s, starting with an empty collection", self.file_path)
            await self._persist({})
            self._resources = {}
        except OSError as exc:
            raise PersistenceError(f"Cannot read {self.file_path}: {exc}") from exc
        else:
            try:
                document = ResourceDocument.model_validate_json(raw)
            except ValidationError as exc:
                raise StoreCorruptedError(f"{self.file_path} is not a valid resource document") from exc
            resources = {resource.id: resource for resource in document.resources}
            if len(resources) != len(document.resources):
                raise StoreCorruptedError(f"{self.file_path} holds several resources with the same id")
            self._resources = resources
            logger.info("Loaded %d resources from %s", len(self._resources), self.file_path)
        self._initialized = True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    async def list(self, filters: Optional[ResourceFilters] = None) -> List[Resource]:
        """Return the records matching every given filter, in insertion order."""
        filters = filters or ResourceFilters()
        async with self._lock:
            await self._ensure_initialized()
            return [
                resource.model_copy(deep=True)
                for resource in self._resources.values()
                if self._matches(resource, filters)
            ]

    async def find_by_id(self, resource_id: str) -> Optional[Resource]:
        async with self._lock:
            await self._ensure_initialized()
            resource = self._resources.get(resource_id)
            return resource.model_copy(deep=True) if resource is not None else None

    async def count(self) -> int:
        async with self._lock:
            await self._ensure_initialized()
            return len(self._resources)

    @staticmethod
    def _matches(resource: Resource, filters: ResourceFilters) -> bool:
        if filters.search:
            needle = filters.search.lower()
            if needle not in resource.name.lower() and needle not in resource.description.lower():
                return False
        if filters.tag and filters.tag.lower() not in resource.tags:
            return False
        if filters.updated_after is not None and resource.updated_at < filters.updated_after:
            return False
        return True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    async def insert(self, data: ResourceCreate) -> Resource:
        """Create a record with a fresh id, persist it and return it."""
        async with self._lock:
            await self._ensure_initialized()
            now = utcnow()
            resource = Resource(
                id=str(uuid.uuid4()),
                name=data.name,
                description=data.description,
                tags=list(data.tags),
                created_at=now,
                updated_at=now,
                version=1,
            )
            pending = dict(self._resources)
            pending[resource.id] = resource
            await self._commit(pending)
            logger.info("Created resource %s", resource.id)
            return resource.model_copy(deep=True)

    async def update(self, resource_id: str, data: ResourceUpdate) -> Optional[Resource]:
        """Replace the supplied fields of a record.

        Returns ``None`` when no record has the given id.  The record
        keeps its position in the collection.
        """
        async with self._lock:
            await self._ensure_initialized()
            current = self._resources.get(resource_id)
            if current is None:
                return None
            changes = data.changes()
            updated = current.model_copy(
                update={
                    **changes,
                    "updated_at": max(utcnow(), current.updated_at),
                    "version": current.version + 1,
                },
                deep=True,
            )
            pending = dict(self._resources)
            pending[resource_id] = updated
            await self._commit(pending)
            logger.info("Updated resource %s to version %d", resource_id, updated.version)
            return updated.model_copy(deep=True)

    async def remove(self, resource_id: str) -> bool:
        """Delete a record.  Returns ``False`` if it did not exist."""
        async with self._lock:
            await self._ensure_initialized()
            if resource_id not in self._resources:
                return False
            pending = {key: value for key, value in self._resources.items() if key != resource_id}
            await self._commit(pending)
            logger.info("Deleted resource %s", resource_id)
            return True

    async def _commit(self, pending: Dict[str, Resource]) -> None:
        await self._persist(pending)
        self._resources = pending

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    async def _persist(self, resources: Dict[str, Resource]) -> None:
        document = ResourceDocument(resources=list(resources.values()))
        payload = document.model_dump_json(by_alias=True, indent=2)
        try:
            await asyncio.to_thread(self._write_file, payload)
        except OSError as exc:
            logger.error("Failed to persist resources to %s: %s", self.file_path, exc)
            raise PersistenceError(f"Cannot write {self.file_path}: {exc}") from exc

    def _write_file(self, payload: str) -> None:
        """Atomically replace the backing file with ``payload``."""
        directory = self.file_path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.file_path.name}.", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.file_path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
