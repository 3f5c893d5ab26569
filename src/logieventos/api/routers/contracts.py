"""
logieventos.api.routers.contracts

Contracts: CRUD plus search, status counts and a cost summary report.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from logieventos.api.deps import db_session
from logieventos.api.routers.crud import CrudSpec, add_crud_routes
from logieventos.api.schemas import ContractCreate, ContractOut, ContractUpdate, dump
from logieventos.auth.deps import authorize
from logieventos.auth.models import Action, Principal
from logieventos.auth.policy import ResourceClass
from logieventos.db.models import Contract, Personnel, Provider, Resource
from logieventos.db.repositories.records import ContractRepo, RecordRepo
from logieventos.db.repositories.users import parse_id

router = APIRouter(prefix="/api/contracts", tags=["contracts"])

_read = authorize(ResourceClass.contract, Action.read)


@router.get("/search")
async def search_contracts(
    name: str = Query(default=""),
    _: Principal = Depends(_read),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    if not name.strip():
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST, detail='Query parameter "name" is required'
        )
    contracts = await ContractRepo(session).search_by_name(name.strip())
    return {"success": True, "data": [dump(ContractOut, c) for c in contracts]}


@router.get("/count-by-status")
async def count_by_status(
    _: Principal = Depends(_read),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    return {"success": True, "data": await ContractRepo(session).count_by_status()}


async def build_contract_report(session: AsyncSession, contract: Contract) -> dict[str, Any]:
    resources: list[dict[str, Any]] = []
    for item in contract.resources:
        ref = parse_id(item["resource"])
        resource = await RecordRepo(session, Resource).get(ref) if ref else None
        unit_cost = resource.cost if resource else 0.0
        resources.append(
            {
                "resource": item["resource"],
                "name": resource.name if resource else None,
                "quantity": item["quantity"],
                "unitCost": unit_cost,
                "subtotal": unit_cost * item["quantity"],
            }
        )

    providers: list[dict[str, Any]] = []
    for item in contract.providers:
        ref = parse_id(item["provider"])
        provider = await RecordRepo(session, Provider).get(ref) if ref else None
        providers.append(
            {
                "provider": item["provider"],
                "name": provider.name if provider else None,
                "serviceDescription": item.get("service_description"),
                "cost": item["cost"],
            }
        )

    personnel: list[dict[str, Any]] = []
    for item in contract.personnel:
        ref = parse_id(item["person"])
        person = await RecordRepo(session, Personnel).get(ref) if ref else None
        personnel.append(
            {
                "person": item["person"],
                "name": f"{person.first_name} {person.last_name}" if person else None,
                "role": item.get("role"),
                "hours": item["hours"],
            }
        )

    resources_total = sum(r["subtotal"] for r in resources)
    providers_total = sum(p["cost"] for p in providers)
    total = resources_total + providers_total
    return {
        "contract": dump(ContractOut, contract),
        "resources": resources,
        "providers": providers,
        "personnel": personnel,
        "totals": {
            "resources": resources_total,
            "providers": providers_total,
            "personnelHours": sum(p["hours"] for p in personnel),
            "cost": total,
            "budget": contract.budget,
            "budgetRemaining": contract.budget - total if contract.budget is not None else None,
        },
    }


@router.get("/{record_id}/report")
async def contract_report(
    record_id: uuid.UUID,
    _: Principal = Depends(_read),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    contract = await ContractRepo(session).get(record_id)
    if contract is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Contract not found")
    return {"success": True, "data": await build_contract_report(session, contract)}


add_crud_routes(
    router,
    CrudSpec(
        resource_class=ResourceClass.contract,
        label="Contract",
        model=Contract,
        out_schema=ContractOut,
        create_schema=ContractCreate,
        update_schema=ContractUpdate,
        item_references={
            "resources": ("resource", Resource),
            "providers": ("provider", Provider),
            "personnel": ("person", Personnel),
        },
    ),
)


# --- Module Notes -----------------------------------------------------------
# Line items whose referenced record was deleted later still appear in the
# report, with a null name and zero unit cost.
