"""
logieventos.api.routers.reports

Reports: stored snapshots. A `contract` report captures every contract at
creation time; `summary` and `custom` reports keep the client-supplied data.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from logieventos.api.deps import db_session
from logieventos.api.routers.crud import CrudSpec, add_crud_routes
from logieventos.api.schemas import ContractOut, ReportCreate, ReportOut, ReportUpdate, dump
from logieventos.auth.deps import authorize
from logieventos.auth.models import Action, Principal
from logieventos.auth.policy import ResourceClass
from logieventos.db.models import Report, ReportType
from logieventos.db.repositories.records import ContractRepo, RecordRepo
from logieventos.db.repositories.users import parse_id
from logieventos.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post("", status_code=HTTP_201_CREATED)
async def create_report(
    body: ReportCreate,
    principal: Principal = Depends(authorize(ResourceClass.report, Action.create, live=True)),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    data = body.data
    if body.type is ReportType.contract:
        data = [dump(ContractOut, c) for c in await ContractRepo(session).all()]

    report = await RecordRepo(session, Report).create(
        title=body.title,
        description=body.description,
        type=body.type,
        data=data,
        created_by=parse_id(principal.id),
    )
    await session.commit()
    log.info("report.created", report_id=str(report.id), type=body.type.value)
    return {"success": True, "message": "Report created", "data": dump(ReportOut, report)}


add_crud_routes(
    router,
    CrudSpec(
        resource_class=ResourceClass.report,
        label="Report",
        model=Report,
        out_schema=ReportOut,
        create_schema=ReportCreate,
        update_schema=ReportUpdate,
        operations=frozenset({"list", "get", "update", "delete"}),
    ),
)
