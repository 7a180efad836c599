"""
Platform capability protocols.

WHAT: Abstract interfaces for the datastore and blob store
WHY: Decouple services from a specific backend; everything is passed in explicitly
HOW: Use Protocol to define create/list/update over named collections and upload
"""

from typing import Protocol, Any, Optional


class Datastore(Protocol):
    """Document-style access to named collections."""

    def create(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert a record and return it with generated fields filled in."""
        ...

    def list(
        self,
        collection: str,
        where: Optional[dict[str, Any]] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> list[dict[str, Any]]:
        """Return records whose fields equal every value in where."""
        ...

    def update(self, collection: str, record_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """Apply changes to one record and return the updated record."""
        ...


class BlobStore(Protocol):
    """File storage returning publicly reachable URLs."""

    def upload(self, data: bytes, path: str, *, upsert: bool = True) -> str:
        """Store data at path and return its public URL."""
        ...
