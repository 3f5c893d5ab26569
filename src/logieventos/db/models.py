"""
logieventos.db.models

Persistence schema for LogiEventos.

Responsibilities:
- Define ORM models for users and the event-logistics catalog:
  - User: accounts and their single role
  - Event, Contract, Resource, Provider, Personnel, Report
  - EventType, ResourceType, ProviderType, PersonnelType taxonomies
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, Enum, Float, ForeignKey, Index, String, Text
from sqlalchemy import Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from logieventos.auth.models import Role
from logieventos.db.base import Base, RecordMixin


class EventStatus(enum.StrEnum):
    planificado = "planificado"
    en_progreso = "en_progreso"
    completado = "completado"
    cancelado = "cancelado"


class ContractStatus(enum.StrEnum):
    borrador = "borrador"
    activo = "activo"
    completado = "completado"
    cancelado = "cancelado"


class ResourceStatus(enum.StrEnum):
    disponible = "disponible"
    en_uso = "en_uso"
    mantenimiento = "mantenimiento"
    descartado = "descartado"


class ProviderStatus(enum.StrEnum):
    activo = "activo"
    inactivo = "inactivo"
    suspendido = "suspendido"


class PersonnelStatus(enum.StrEnum):
    disponible = "disponible"
    asignado = "asignado"
    vacaciones = "vacaciones"
    inactivo = "inactivo"


class EventCategory(enum.StrEnum):
    corporativo = "corporativo"
    social = "social"
    cultural = "cultural"
    deportivo = "deportivo"
    academico = "academico"


class ReportType(enum.StrEnum):
    contract = "contract"
    summary = "summary"
    custom = "custom"


def _user_ref(*, index: bool = False) -> Mapped[uuid.UUID | None]:
    # Deleting a user keeps the records it authored.
    return mapped_column(
        SAUuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=index,
    )


class User(RecordMixin, Base):
    __tablename__ = "users"

    document: Mapped[int] = mapped_column(BigInteger, nullable=False, unique=True)
    fullname: Mapped[str] = mapped_column(String(256), nullable=False)
    username: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[Role] = mapped_column(Enum(Role), nullable=False, default=Role.lider, index=True)
    active: Mapped[bool] = mapped_column(nullable=False, default=True)


class PersonnelType(RecordMixin, Base):
    __tablename__ = "personnel_types"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)
    active: Mapped[bool] = mapped_column(nullable=False, default=True)
    created_by: Mapped[uuid.UUID | None] = _user_ref()
    updated_by: Mapped[uuid.UUID | None] = _user_ref()


class ProviderType(RecordMixin, Base):
    __tablename__ = "provider_types"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)
    active: Mapped[bool] = mapped_column(nullable=False, default=True)
    created_by: Mapped[uuid.UUID | None] = _user_ref()
    updated_by: Mapped[uuid.UUID | None] = _user_ref()


class ResourceType(RecordMixin, Base):
    __tablename__ = "resource_types"

    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(nullable=False, default=True)
    created_by: Mapped[uuid.UUID | None] = _user_ref()


class EventType(RecordMixin, Base):
    __tablename__ = "event_types"

    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[EventCategory] = mapped_column(Enum(EventCategory), nullable=False)
    estimated_duration: Mapped[int | None] = mapped_column(nullable=True)
    # [{resource_type, description, default_quantity}]
    default_resources: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    additional_requirements: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    required_personnel_type: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("personnel_types.id"), nullable=False
    )
    active: Mapped[bool] = mapped_column(nullable=False, default=True)
    created_by: Mapped[uuid.UUID | None] = _user_ref()


class Resource(RecordMixin, Base):
    __tablename__ = "resources"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    quantity: Mapped[int] = mapped_column(nullable=False)
    cost: Mapped[float] = mapped_column(Float, nullable=False)
    resource_type: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("resource_types.id"), nullable=False, index=True
    )
    status: Mapped[ResourceStatus] = mapped_column(
        Enum(ResourceStatus), nullable=False, default=ResourceStatus.disponible
    )
    created_by: Mapped[uuid.UUID | None] = _user_ref()
    last_updated_by: Mapped[uuid.UUID | None] = _user_ref()


class Provider(RecordMixin, Base):
    __tablename__ = "providers"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    contact_person: Mapped[str | None] = mapped_column(String(256), nullable=True)
    email: Mapped[str | None] = mapped_column(String(256), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    provider_type: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("provider_types.id"), nullable=False, index=True
    )
    status: Mapped[ProviderStatus] = mapped_column(
        Enum(ProviderStatus), nullable=False, default=ProviderStatus.activo
    )
    created_by: Mapped[uuid.UUID | None] = _user_ref()


class Personnel(RecordMixin, Base):
    __tablename__ = "personnel"

    first_name: Mapped[str] = mapped_column(String(128), nullable=False)
    last_name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str | None] = mapped_column(String(256), nullable=True, unique=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    personnel_type: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("personnel_types.id"), nullable=False, index=True
    )
    status: Mapped[PersonnelStatus] = mapped_column(
        Enum(PersonnelStatus), nullable=False, default=PersonnelStatus.disponible
    )
    skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[uuid.UUID | None] = _user_ref()


class Contract(RecordMixin, Base):
    __tablename__ = "contracts"

    name: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    client_name: Mapped[str] = mapped_column(String(256), nullable=False)
    client_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    client_email: Mapped[str] = mapped_column(String(256), nullable=False)
    start_date: Mapped[datetime] = mapped_column(nullable=False)
    end_date: Mapped[datetime] = mapped_column(nullable=False)
    budget: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[ContractStatus] = mapped_column(
        Enum(ContractStatus), nullable=False, default=ContractStatus.borrador, index=True
    )
    terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Line items keep their own shape; ids are validated on write.
    resources: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    providers: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    personnel: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[uuid.UUID | None] = _user_ref()


class Event(RecordMixin, Base):
    __tablename__ = "events"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(256), nullable=False)
    event_type: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("event_types.id"), nullable=False, index=True
    )
    contract: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("contracts.id"), nullable=False, index=True
    )
    responsable: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    start_date: Mapped[datetime] = mapped_column(nullable=False)
    end_date: Mapped[datetime] = mapped_column(nullable=False)
    status: Mapped[EventStatus] = mapped_column(
        Enum(EventStatus), nullable=False, default=EventStatus.planificado, index=True
    )
    created_by: Mapped[uuid.UUID | None] = _user_ref()

    __table_args__ = (Index("ix_events_start_date", "start_date"),)


class Report(RecordMixin, Base):
    __tablename__ = "reports"

    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[ReportType] = mapped_column(Enum(ReportType), nullable=False)
    data: Mapped[Any] = mapped_column(JSON, nullable=True)
    created_by: Mapped[uuid.UUID | None] = _user_ref(index=True)


# --- Module Notes -----------------------------------------------------------
# Column names are snake_case; the HTTP layer exposes camelCase names through
# pydantic aliases in `api.schemas`.
