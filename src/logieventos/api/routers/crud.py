"""
logieventos.api.routers.crud

Shared CRUD route builder for the catalog resources.

Responsibilities:
- Register list/get/create/update/delete routes for one model, each bound
  statically to its `(resource_class, action)` policy declaration.
- Validate referenced ids before writing.
- Apply per-role row visibility (lider) and locked fields (coordinador).
- Wrap results in the `{success, data}` envelope.

Writes resolve the live user record (the author must still exist and be
active); reads follow the `live_identity_lookup` setting.
"""

# No `from __future__ import annotations` here: the handlers below annotate
# request bodies with schema classes taken from `spec` at definition time.

import math
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
)

from logieventos.api.deps import Paging, db_session, paging
from logieventos.api.schemas import ApiModel, dump
from logieventos.auth.deps import authorize
from logieventos.auth.models import Action, Principal, Role
from logieventos.db.base import Base
from logieventos.db.repositories.records import RecordRepo
from logieventos.db.repositories.users import parse_id
from logieventos.observability.logging import get_logger

log = get_logger(__name__)

ALL_OPERATIONS = frozenset({"list", "get", "create", "update", "delete"})


@dataclass(frozen=True)
class RowFilter:
    """
    Rows a restricted role may see: `field` in `values` (or not in, with
    `exclude`).
    """

    field: str
    values: frozenset[Any]
    exclude: bool = False

    def clause(self, model: type[Base]) -> Any:
        column = getattr(model, self.field)
        return column.not_in(self.values) if self.exclude else column.in_(self.values)

    def allows(self, record: Any) -> bool:
        return (getattr(record, self.field) in self.values) != self.exclude


@dataclass(frozen=True)
class ListQuery:
    where: tuple[Any, ...] = ()
    order_by: tuple[Any, ...] = ()


def no_list_params() -> ListQuery:
    return ListQuery()


@dataclass(frozen=True)
class CrudSpec:
    resource_class: str
    label: str
    model: type[Base]
    out_schema: type[ApiModel]
    create_schema: type[ApiModel]
    update_schema: type[ApiModel]
    # scalar field -> referenced model
    references: dict[str, type[Base]] = field(default_factory=dict)
    # list field -> (id key inside each item, referenced model)
    item_references: dict[str, tuple[str, type[Base]]] = field(default_factory=dict)
    creator_field: str | None = "created_by"
    updater_field: str | None = None
    operations: frozenset[str] = ALL_OPERATIONS
    lider_filter: RowFilter | None = None
    # fields only admin may change
    coordinador_locked: frozenset[str] = frozenset()
    # dependency returning extra list conditions from query parameters
    list_params: Callable[..., ListQuery] | None = None

    def visible_where(self, principal: Principal) -> tuple[Any, ...]:
        if principal.role is Role.lider and self.lider_filter is not None:
            return (self.lider_filter.clause(self.model),)
        return ()

    def is_visible(self, principal: Principal, record: Any) -> bool:
        if principal.role is Role.lider and self.lider_filter is not None:
            return self.lider_filter.allows(record)
        return True


def to_columns(body: BaseModel, *, exclude_unset: bool = False) -> dict[str, Any]:
    """
    Python values for scalar columns, JSON-safe values for JSON columns.
    """

    native = body.model_dump(exclude_unset=exclude_unset)
    jsonable = body.model_dump(mode="json", exclude_unset=exclude_unset)
    return {
        key: jsonable[key] if isinstance(value, list | dict) else value
        for key, value in native.items()
    }


async def check_references(session: AsyncSession, spec: CrudSpec, values: dict[str, Any]) -> None:
    problems: list[str] = []
    for name, model in spec.references.items():
        ref = values.get(name)
        if ref is not None and not await RecordRepo(session, model).exists(ref):
            problems.append(f"{name}: {ref}")
    for name, (key, model) in spec.item_references.items():
        ids = [parse_id(item[key]) for item in values.get(name) or []]
        for missing in await RecordRepo(session, model).missing(i for i in ids if i is not None):
            problems.append(f"{name}.{key}: {missing}")
    if problems:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST,
            detail=f"Unknown references: {', '.join(problems)}",
        )


def check_date_order(record: Any) -> None:
    start = getattr(record, "start_date", None)
    end = getattr(record, "end_date", None)
    if start is not None and end is not None and end < start:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST, detail="endDate must not be before startDate"
        )


def page_envelope(items: list[dict[str, Any]], *, total: int, paging: Paging) -> dict[str, Any]:
    return {
        "success": True,
        "data": items,
        "total": total,
        "page": paging.page,
        "pages": math.ceil(total / paging.limit) if total else 0,
    }


def add_crud_routes(router: APIRouter, spec: CrudSpec) -> APIRouter:
    """
    Append the standard routes to `router`. Call it after any literal
    sub-paths (`/search`, `/active`, ...) so those match before `/{record_id}`.
    """

    async def _load(session: AsyncSession, record_id: uuid.UUID) -> Any:
        record = await RecordRepo(session, spec.model).get(record_id)
        if record is None:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=f"{spec.label} not found")
        return record

    if "list" in spec.operations:

        @router.get("")
        async def list_records(
            principal: Principal = Depends(authorize(spec.resource_class, Action.read)),
            page: Paging = Depends(paging),
            query: ListQuery = Depends(spec.list_params or no_list_params),
            session: AsyncSession = Depends(db_session),
        ) -> dict[str, Any]:
            items, total = await RecordRepo(session, spec.model).page(
                page=page.page,
                limit=page.limit,
                where=(*spec.visible_where(principal), *query.where),
                order_by=query.order_by,
            )
            return page_envelope(
                [dump(spec.out_schema, i) for i in items], total=total, paging=page
            )

    if "get" in spec.operations:

        @router.get("/{record_id}")
        async def get_record(
            record_id: uuid.UUID,
            principal: Principal = Depends(authorize(spec.resource_class, Action.read)),
            session: AsyncSession = Depends(db_session),
        ) -> dict[str, Any]:
            record = await _load(session, record_id)
            if not spec.is_visible(principal, record):
                raise HTTPException(
                    status_code=HTTP_403_FORBIDDEN,
                    detail=f"{spec.label} is not available to your role",
                )
            return {"success": True, "data": dump(spec.out_schema, record)}

    if "create" in spec.operations:

        @router.post("", status_code=HTTP_201_CREATED)
        async def create_record(
            body: spec.create_schema,  # type: ignore[valid-type]
            principal: Principal = Depends(
                authorize(spec.resource_class, Action.create, live=True)
            ),
            session: AsyncSession = Depends(db_session),
        ) -> dict[str, Any]:
            values = to_columns(body)
            await check_references(session, spec, values)
            if spec.creator_field:
                values[spec.creator_field] = parse_id(principal.id)
            record = await RecordRepo(session, spec.model).create(**values)
            await session.commit()
            log.info("record.created", resource=spec.resource_class, record_id=str(record.id))
            return {
                "success": True,
                "message": f"{spec.label} created",
                "data": dump(spec.out_schema, record),
            }

    if "update" in spec.operations:

        async def update_record(
            record_id: uuid.UUID,
            body: spec.update_schema,  # type: ignore[valid-type]
            principal: Principal = Depends(
                authorize(spec.resource_class, Action.update, live=True)
            ),
            session: AsyncSession = Depends(db_session),
        ) -> dict[str, Any]:
            requested = to_columns(body, exclude_unset=True)
            if principal.role is Role.coordinador:
                locked = sorted(spec.coordinador_locked.intersection(requested))
                if locked:
                    raise HTTPException(
                        status_code=HTTP_403_FORBIDDEN,
                        detail=f"Only admin may change: {', '.join(locked)}",
                    )
            record = await _load(session, record_id)
            columns = spec.model.__table__.columns
            # An explicit null only clears columns that may be empty.
            changes = {
                k: v for k, v in requested.items() if v is not None or columns[k].nullable
            }
            await check_references(session, spec, changes)
            if spec.updater_field:
                changes[spec.updater_field] = parse_id(principal.id)
            record = await RecordRepo(session, spec.model).update(record, changes)
            check_date_order(record)
            await session.commit()
            log.info("record.updated", resource=spec.resource_class, record_id=str(record.id))
            return {
                "success": True,
                "message": f"{spec.label} updated",
                "data": dump(spec.out_schema, record),
            }

        router.add_api_route("/{record_id}", update_record, methods=["PUT"], name="replace_record")
        router.add_api_route("/{record_id}", update_record, methods=["PATCH"], name="patch_record")

    if "delete" in spec.operations:

        @router.delete("/{record_id}")
        async def delete_record(
            record_id: uuid.UUID,
            _: Principal = Depends(authorize(spec.resource_class, Action.delete, live=True)),
            session: AsyncSession = Depends(db_session),
        ) -> dict[str, Any]:
            record = await _load(session, record_id)
            await RecordRepo(session, spec.model).delete(record)
            await session.commit()
            log.info("record.deleted", resource=spec.resource_class, record_id=str(record_id))
            return {"success": True, "message": f"{spec.label} deleted"}

    return router


# --- Module Notes -----------------------------------------------------------
# Update failures after `check_date_order` roll back when the request session
# closes without commit.
