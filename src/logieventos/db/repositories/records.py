"""
logieventos.db.repositories.records

Generic repository for catalog records (events, contracts, resources, ...).

Responsibilities:
- Paged listing, lookup, create/update/delete for any `RecordMixin` model.
- Case-insensitive text search shared by list filters and `/search` routes.
- Contract-specific queries (name search, status counts).
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from logieventos.db.base import Base, utcnow
from logieventos.db.models import Contract

ModelT = TypeVar("ModelT", bound=Base)


def text_match(model: type[Base], fields: Sequence[str], term: str) -> Any:
    """
    Case-insensitive substring condition over any of `fields`. LIKE wildcards
    in `term` match literally.
    """

    needle = term.lower()
    return or_(
        *(func.lower(getattr(model, name)).contains(needle, autoescape=True) for name in fields)
    )


class RecordRepo(Generic[ModelT]):
    def __init__(self, session: AsyncSession, model: type[ModelT]) -> None:
        self._session = session
        self._model = model

    async def get(self, record_id: uuid.UUID) -> ModelT | None:
        return await self._session.get(self._model, record_id)

    async def exists(self, record_id: uuid.UUID) -> bool:
        stmt = select(func.count()).select_from(self._model).where(self._model.id == record_id)
        return (await self._session.execute(stmt)).scalar_one() > 0

    async def missing(self, record_ids: Iterable[uuid.UUID]) -> list[uuid.UUID]:
        wanted = set(record_ids)
        if not wanted:
            return []
        stmt = select(self._model.id).where(self._model.id.in_(wanted))
        found = set((await self._session.execute(stmt)).scalars().all())
        return sorted(wanted - found, key=str)

    async def page(
        self,
        *,
        page: int,
        limit: int,
        filters: dict[str, Any] | None = None,
        where: Iterable[Any] = (),
        order_by: Sequence[Any] = (),
    ) -> tuple[list[ModelT], int]:
        # Newest first unless the caller orders explicitly.
        conditions = [getattr(self._model, k) == v for k, v in (filters or {}).items()]
        conditions.extend(where)
        total_stmt = select(func.count()).select_from(self._model).where(*conditions)
        total = (await self._session.execute(total_stmt)).scalar_one()
        stmt = (
            select(self._model)
            .where(*conditions)
            .order_by(*order_by, desc(self._model.created_at))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = list((await self._session.execute(stmt)).scalars().all())
        return items, total

    async def search(
        self,
        fields: Sequence[str],
        term: str,
        *,
        where: Iterable[Any] = (),
        limit: int = 10,
    ) -> list[ModelT]:
        stmt = (
            select(self._model)
            .where(text_match(self._model, fields, term), *where)
            .order_by(desc(self._model.created_at))
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def create(self, **fields: Any) -> ModelT:
        record = self._model(**fields)
        self._session.add(record)
        await self._session.flush()
        return record

    async def update(self, record: ModelT, changes: dict[str, Any]) -> ModelT:
        for field, value in changes.items():
            setattr(record, field, value)
        record.updated_at = utcnow()
        await self._session.flush()
        return record

    async def delete(self, record: ModelT) -> None:
        await self._session.delete(record)
        await self._session.flush()


class ContractRepo(RecordRepo[Contract]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Contract)

    async def search_by_name(self, name: str, *, limit: int = 10) -> list[Contract]:
        return await self.search(["name"], name, limit=limit)

    async def count_by_status(self) -> dict[str, int]:
        stmt = select(Contract.status, func.count()).group_by(Contract.status)
        rows = (await self._session.execute(stmt)).all()
        return {status.value: count for status, count in rows}

    async def all(self) -> list[Contract]:
        stmt = select(Contract).order_by(desc(Contract.created_at))
        return list((await self._session.execute(stmt)).scalars().all())


# --- Module Notes -----------------------------------------------------------
# Callers commit; repositories only flush so uniqueness errors surface early.
