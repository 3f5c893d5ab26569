"""
logieventos.api.routers.catalog

Events, resources, providers and personnel: CRUD under `/api/*`.

Responsibilities:
- Declare per-resource visibility for lider and fields coordinador may not change.
- Resource search and the resource/personnel list filters.
"""

from __future__ import annotations

import uuid
from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import asc, desc
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_400_BAD_REQUEST

from logieventos.api.deps import db_session
from logieventos.api.routers.crud import CrudSpec, ListQuery, RowFilter, add_crud_routes
from logieventos.api.schemas import (
    EventCreate,
    EventOut,
    EventUpdate,
    PersonnelCreate,
    PersonnelOut,
    PersonnelUpdate,
    ProviderCreate,
    ProviderOut,
    ProviderUpdate,
    ResourceCreate,
    ResourceOut,
    ResourceUpdate,
    dump,
)
from logieventos.auth.deps import authorize
from logieventos.auth.models import Action, Principal
from logieventos.auth.policy import ResourceClass
from logieventos.db.models import (
    Contract,
    Event,
    EventStatus,
    EventType,
    Personnel,
    PersonnelStatus,
    PersonnelType,
    Provider,
    ProviderStatus,
    ProviderType,
    Resource,
    ResourceStatus,
    ResourceType,
    User,
)
from logieventos.db.repositories.records import RecordRepo, text_match

MIN_SEARCH_LENGTH = 3
PERSONNEL_SORT_FIELDS = {
    "lastName": "last_name",
    "firstName": "first_name",
    "email": "email",
    "createdAt": "created_at",
}


def resource_list_params(
    status: ResourceStatus | None = Query(default=None),
    resource_type: uuid.UUID | None = Query(default=None, alias="resourceType"),
) -> ListQuery:
    where = []
    if status is not None:
        where.append(Resource.status == status)
    if resource_type is not None:
        where.append(Resource.resource_type == resource_type)
    return ListQuery(where=tuple(where))


def personnel_list_params(
    search: str = Query(default=""),
    personnel_type: uuid.UUID | None = Query(default=None, alias="personnelType"),
    status: PersonnelStatus | None = Query(default=None),
    sort_by: str = Query(default="lastName", alias="sortBy"),
    order: Literal["asc", "desc"] = Query(default="asc"),
) -> ListQuery:
    where = []
    if search.strip():
        where.append(text_match(Personnel, ["first_name", "last_name", "email"], search.strip()))
    if personnel_type is not None:
        where.append(Personnel.personnel_type == personnel_type)
    if status is not None:
        where.append(Personnel.status == status)
    # Unknown sort keys fall back to last name.
    column = getattr(Personnel, PERSONNEL_SORT_FIELDS.get(sort_by, "last_name"))
    direction = desc if order == "desc" else asc
    return ListQuery(where=tuple(where), order_by=(direction(column),))


events_router = add_crud_routes(
    APIRouter(prefix="/api/events", tags=["events"]),
    CrudSpec(
        resource_class=ResourceClass.event,
        label="Event",
        model=Event,
        out_schema=EventOut,
        create_schema=EventCreate,
        update_schema=EventUpdate,
        references={"event_type": EventType, "contract": Contract, "responsable": User},
        lider_filter=RowFilter("status", frozenset({EventStatus.cancelado}), exclude=True),
    ),
)

_resources = CrudSpec(
    resource_class=ResourceClass.resource,
    label="Resource",
    model=Resource,
    out_schema=ResourceOut,
    create_schema=ResourceCreate,
    update_schema=ResourceUpdate,
    references={"resource_type": ResourceType},
    updater_field="last_updated_by",
    lider_filter=RowFilter("status", frozenset({ResourceStatus.disponible})),
    list_params=resource_list_params,
)

resources_router = APIRouter(prefix="/api/resources", tags=["resources"])


@resources_router.get("/search")
async def search_resources(
    query: str = Query(default=""),
    principal: Principal = Depends(authorize(ResourceClass.resource, Action.read)),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    term = query.strip()
    if len(term) < MIN_SEARCH_LENGTH:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST,
            detail=f"Search needs at least {MIN_SEARCH_LENGTH} characters",
        )
    found = await RecordRepo(session, Resource).search(
        ["name", "description"], term, where=_resources.visible_where(principal)
    )
    return {"success": True, "data": [dump(ResourceOut, r) for r in found]}


add_crud_routes(resources_router, _resources)

providers_router = add_crud_routes(
    APIRouter(prefix="/api/providers", tags=["providers"]),
    CrudSpec(
        resource_class=ResourceClass.provider,
        label="Provider",
        model=Provider,
        out_schema=ProviderOut,
        create_schema=ProviderCreate,
        update_schema=ProviderUpdate,
        references={"provider_type": ProviderType},
        lider_filter=RowFilter("status", frozenset({ProviderStatus.activo})),
        coordinador_locked=frozenset({"status"}),
    ),
)

personnel_router = add_crud_routes(
    APIRouter(prefix="/api/personnel", tags=["personnel"]),
    CrudSpec(
        resource_class=ResourceClass.personnel,
        label="Personnel",
        model=Personnel,
        out_schema=PersonnelOut,
        create_schema=PersonnelCreate,
        update_schema=PersonnelUpdate,
        references={"personnel_type": PersonnelType},
        lider_filter=RowFilter("status", frozenset({PersonnelStatus.disponible})),
        coordinador_locked=frozenset({"status"}),
        list_params=personnel_list_params,
    ),
)


# --- Module Notes -----------------------------------------------------------
# Resource status stays writable by coordinador: moving equipment in and out of
# maintenance is day-to-day logistics work.
