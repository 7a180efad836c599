"""
SQLAlchemy-backed datastore.

WHAT: Datastore implementation over the ORM tables
WHY: Services talk in collections and dicts, persistence stays swappable
HOW: Map collection names to ORM models, one session per operation
"""

from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError

from ..core.database import SessionLocal
from ..core.models import User, Negotiation, PriceRange, Deal, Notification
from ..utils.exceptions import DuplicateRecordError, RecordNotFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)

COLLECTIONS = {
    "users": User,
    "negotiations": Negotiation,
    "price_ranges": PriceRange,
    "deals": Deal,
    "notifications": Notification,
}


def _row_to_dict(row) -> dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


def _is_unique_violation(error: IntegrityError) -> bool:
    text = str(error.orig).lower()
    return "unique" in text or "duplicate" in text


class SqlDatastore:
    """
    Datastore over SQLAlchemy sessions.

    WHAT: create/list/update by collection name
    WHY: Implements the Datastore protocol for the service layer
    HOW: Short-lived session per call, unique violations -> DuplicateRecordError
    """

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or SessionLocal

    @contextmanager
    def _session(self):
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @staticmethod
    def _model(collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    def create(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        model = self._model(collection)
        try:
            with self._session() as db:
                row = model(**record)
                db.add(row)
                db.flush()
                created = _row_to_dict(row)
        except IntegrityError as e:
            if _is_unique_violation(e):
                logger.warning(f"Duplicate record in {collection}: {e.orig}")
                raise DuplicateRecordError(collection, str(e.orig)) from e
            raise

        logger.debug(f"Created {collection} record {created.get('id')}")
        return created

    def list(
        self,
        collection: str,
        where: Optional[dict[str, Any]] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> list[dict[str, Any]]:
        model = self._model(collection)
        with self._session() as db:
            query = db.query(model)
            if where:
                query = query.filter_by(**where)
            if order_by:
                column = getattr(model, order_by)
                query = query.order_by(column.desc() if descending else column.asc())
            return [_row_to_dict(row) for row in query.all()]

    def update(self, collection: str, record_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        model = self._model(collection)
        try:
            with self._session() as db:
                row = db.get(model, record_id)
                if row is None:
                    raise RecordNotFoundError(collection, record_id)
                for field, value in changes.items():
                    if field not in model.__table__.columns:
                        raise ValueError(f"Unknown field {field} for {collection}")
                    setattr(row, field, value)
                db.flush()
                updated = _row_to_dict(row)
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise DuplicateRecordError(collection, str(e.orig)) from e
            raise

        logger.debug(f"Updated {collection} record {record_id}: {sorted(changes)}")
        return updated
