"""
logieventos.api.routers.taxonomies

The four "type" taxonomies (event, resource, provider, personnel types).

Responsibilities:
- CRUD per taxonomy plus `GET /active` for form pickers.
- Inactive types are hidden from lider; only admin toggles `active`.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from logieventos.api.deps import Paging, db_session, paging
from logieventos.api.routers.crud import CrudSpec, RowFilter, add_crud_routes, page_envelope
from logieventos.api.schemas import (
    EventTypeCreate,
    EventTypeOut,
    EventTypeUpdate,
    SimpleTypeCreate,
    SimpleTypeOut,
    SimpleTypeUpdate,
    dump,
)
from logieventos.auth.deps import authorize
from logieventos.auth.models import Action, Principal
from logieventos.auth.policy import ResourceClass
from logieventos.db.models import EventType, PersonnelType, ProviderType, ResourceType
from logieventos.db.repositories.records import RecordRepo


def _taxonomy_router(prefix: str, tag: str, spec: CrudSpec) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])

    # Registered before `/{record_id}` so the literal path wins.
    @router.get("/active")
    async def list_active(
        principal: Principal = Depends(authorize(spec.resource_class, Action.read)),
        page: Paging = Depends(paging),
        session: AsyncSession = Depends(db_session),
    ) -> dict[str, Any]:
        items, total = await RecordRepo(session, spec.model).page(
            page=page.page,
            limit=page.limit,
            filters={"active": True},
            where=spec.visible_where(principal),
        )
        return page_envelope([dump(spec.out_schema, i) for i in items], total=total, paging=page)

    return add_crud_routes(router, spec)


_ACTIVE_ONLY = RowFilter("active", frozenset({True}))
_ADMIN_TOGGLES = frozenset({"active"})


event_types_router = _taxonomy_router(
    "/api/event-types",
    "event-types",
    CrudSpec(
        resource_class=ResourceClass.event_type,
        label="Event type",
        model=EventType,
        out_schema=EventTypeOut,
        create_schema=EventTypeCreate,
        update_schema=EventTypeUpdate,
        references={"required_personnel_type": PersonnelType},
        lider_filter=_ACTIVE_ONLY,
        coordinador_locked=_ADMIN_TOGGLES,
    ),
)

resource_types_router = _taxonomy_router(
    "/api/resource-types",
    "resource-types",
    CrudSpec(
        resource_class=ResourceClass.resource_type,
        label="Resource type",
        model=ResourceType,
        out_schema=SimpleTypeOut,
        create_schema=SimpleTypeCreate,
        update_schema=SimpleTypeUpdate,
        coordinador_locked=_ADMIN_TOGGLES,
    ),
)

provider_types_router = _taxonomy_router(
    "/api/provider-types",
    "provider-types",
    CrudSpec(
        resource_class=ResourceClass.provider_type,
        label="Provider type",
        model=ProviderType,
        out_schema=SimpleTypeOut,
        create_schema=SimpleTypeCreate,
        update_schema=SimpleTypeUpdate,
        updater_field="updated_by",
        lider_filter=_ACTIVE_ONLY,
        coordinador_locked=_ADMIN_TOGGLES,
    ),
)

personnel_types_router = _taxonomy_router(
    "/api/personnel-types",
    "personnel-types",
    CrudSpec(
        resource_class=ResourceClass.personnel_type,
        label="Personnel type",
        model=PersonnelType,
        out_schema=SimpleTypeOut,
        create_schema=SimpleTypeCreate,
        update_schema=SimpleTypeUpdate,
        updater_field="updated_by",
        lider_filter=_ACTIVE_ONLY,
        coordinador_locked=_ADMIN_TOGGLES,
    ),
)
