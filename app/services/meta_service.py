from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DomainError


class DatabaseUnavailableError(DomainError):
    def __init__(self, message: str = "Database connection failed") -> None:
        super().__init__(message, "database_unavailable")


class MetaService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def database_time(self) -> datetime:
        """Round-trip to the database and return its clock."""
        try:
            result = await self._session.execute(select(func.now()))
        except (SQLAlchemyError, OSError) as e:
            raise DatabaseUnavailableError() from e
        return result.scalar_one()


def meta_service_factory_provider() -> type[MetaService]:
    return MetaService
