"""
Storage Service - Durable key-value store backed by SQLAlchemy
Holds the session record that survives app restarts
"""
from typing import Optional
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
import asyncio
import logging

from moviehub.database import Base, engine as default_engine
from moviehub.models.stored_value import StoredValue

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    String-keyed store with get/set/remove, the shape a mobile async storage
    exposes. Each call is one short transaction, run in the default executor
    so the event loop never blocks on the database.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self._engine = engine or default_engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        Base.metadata.create_all(bind=self._engine, tables=[StoredValue.__table__])

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def get_item(self, key: str) -> Optional[str]:
        return await self._run(self._get, key)

    async def set_item(self, key: str, value: str) -> None:
        await self._run(self._set, key, value)

    async def remove_item(self, key: str) -> None:
        await self._run(self._remove, key)

    def _get(self, key: str) -> Optional[str]:
        db = self._session_factory()
        try:
            row = db.get(StoredValue, key)
            return row.value if row else None
        finally:
            db.close()

    def _set(self, key: str, value: str) -> None:
        db = self._session_factory()
        try:
            row = db.get(StoredValue, key)
            if row:
                row.value = value  # type: ignore
            else:
                db.add(StoredValue(key=key, value=value))
            db.commit()
            logger.debug(f"Stored value for key '{key}'")
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _remove(self, key: str) -> None:
        db = self._session_factory()
        try:
            row = db.get(StoredValue, key)
            if row:
                db.delete(row)
                db.commit()
                logger.debug(f"Removed value for key '{key}'")
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
