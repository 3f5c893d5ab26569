"""
logieventos.api.schemas

Request/response models for the HTTP API.

Responsibilities:
- Validate request bodies (enums, ranges, date ordering).
- Expose camelCase field names on the wire while the ORM stays snake_case.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

from logieventos.auth.models import Role
from logieventos.db.models import (
    ContractStatus,
    EventCategory,
    EventStatus,
    PersonnelStatus,
    ProviderStatus,
    ReportType,
    ResourceStatus,
)


def _bcrypt_sized(value: str) -> str:
    # bcrypt only looks at the first 72 bytes and newer releases reject longer input.
    if len(value.encode("utf-8")) > 72:
        raise ValueError("password must be at most 72 bytes")
    return value


def _naive_utc(value: datetime) -> datetime:
    # Stored columns are naive UTC.
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


Password = Annotated[str, Field(min_length=6), AfterValidator(_bcrypt_sized)]
Name = Annotated[str, Field(min_length=1, max_length=256)]
TypeName = Annotated[str, Field(min_length=3, max_length=50)]
Timestamp = Annotated[datetime, AfterValidator(_naive_utc)]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class DateRange(ApiModel):
    @model_validator(mode="after")
    def _end_after_start(self):
        start = getattr(self, "start_date", None)
        end = getattr(self, "end_date", None)
        if start is not None and end is not None and end < start:
            raise ValueError("endDate must not be before startDate")
        return self


class RecordOut(ApiModel):
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


# --- Users / auth ------------------------------------------------------------


class UserOut(RecordOut):
    document: int
    fullname: str
    username: str
    email: str
    role: Role
    active: bool


class SignupRequest(ApiModel):
    document: int = Field(gt=0)
    fullname: Name
    username: Name
    email: EmailStr
    password: Password


class SigninRequest(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ChangePasswordRequest(ApiModel):
    current_password: str = Field(min_length=1)
    new_password: Password


class ForgotPasswordRequest(ApiModel):
    email: EmailStr


class ResetPasswordRequest(ApiModel):
    token: str = Field(min_length=1)
    new_password: Password


class UserCreate(SignupRequest):
    role: Role = Role.lider
    active: bool = True


class UserUpdate(ApiModel):
    document: int | None = Field(default=None, gt=0)
    fullname: Name | None = None
    username: Name | None = None
    email: EmailStr | None = None
    password: Password | None = None
    role: Role | None = None
    active: bool | None = None


# --- Taxonomies --------------------------------------------------------------


class SimpleTypeCreate(ApiModel):
    name: TypeName
    description: str | None = Field(default=None, max_length=200)
    active: bool = True


class SimpleTypeUpdate(ApiModel):
    name: TypeName | None = None
    description: str | None = Field(default=None, max_length=200)
    active: bool | None = None


class SimpleTypeOut(RecordOut):
    name: str
    description: str | None
    active: bool
    created_by: uuid.UUID | None


class DefaultResource(ApiModel):
    resource_type: str = Field(pattern="^(sonido|mobiliario|catering|iluminacion|otros)$")
    description: str = Field(min_length=1)
    default_quantity: int = Field(default=1, ge=1)


class EventTypeCreate(ApiModel):
    name: Name
    description: str | None = None
    category: EventCategory
    estimated_duration: int | None = Field(default=None, ge=1, le=24)
    default_resources: list[DefaultResource] = Field(default_factory=list)
    additional_requirements: list[str] = Field(default_factory=list)
    required_personnel_type: uuid.UUID
    active: bool = True


class EventTypeUpdate(ApiModel):
    name: Name | None = None
    description: str | None = None
    category: EventCategory | None = None
    estimated_duration: int | None = Field(default=None, ge=1, le=24)
    default_resources: list[DefaultResource] | None = None
    additional_requirements: list[str] | None = None
    required_personnel_type: uuid.UUID | None = None
    active: bool | None = None


class EventTypeOut(RecordOut):
    name: str
    description: str | None
    category: EventCategory
    estimated_duration: int | None
    default_resources: list[DefaultResource]
    additional_requirements: list[str]
    required_personnel_type: uuid.UUID
    active: bool
    created_by: uuid.UUID | None


# --- Catalog -----------------------------------------------------------------


class ResourceCreate(ApiModel):
    name: Name
    description: str | None = None
    quantity: int = Field(ge=0)
    cost: float = Field(ge=0)
    resource_type: uuid.UUID
    status: ResourceStatus = ResourceStatus.disponible


class ResourceUpdate(ApiModel):
    name: Name | None = None
    description: str | None = None
    quantity: int | None = Field(default=None, ge=0)
    cost: float | None = Field(default=None, ge=0)
    resource_type: uuid.UUID | None = None
    status: ResourceStatus | None = None


class ResourceOut(RecordOut):
    name: str
    description: str | None
    quantity: int
    cost: float
    resource_type: uuid.UUID
    status: ResourceStatus
    created_by: uuid.UUID | None
    last_updated_by: uuid.UUID | None


class ProviderCreate(ApiModel):
    name: Name
    contact_person: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    provider_type: uuid.UUID
    status: ProviderStatus = ProviderStatus.activo


class ProviderUpdate(ApiModel):
    name: Name | None = None
    contact_person: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    provider_type: uuid.UUID | None = None
    status: ProviderStatus | None = None


class ProviderOut(RecordOut):
    name: str
    contact_person: str | None
    email: str | None
    phone: str | None
    address: str | None
    provider_type: uuid.UUID
    status: ProviderStatus


class PersonnelCreate(ApiModel):
    first_name: Name
    last_name: Name
    email: EmailStr | None = None
    phone: str | None = None
    personnel_type: uuid.UUID
    status: PersonnelStatus = PersonnelStatus.disponible
    skills: list[str] = Field(default_factory=list)


class PersonnelUpdate(ApiModel):
    first_name: Name | None = None
    last_name: Name | None = None
    email: EmailStr | None = None
    phone: str | None = None
    personnel_type: uuid.UUID | None = None
    status: PersonnelStatus | None = None
    skills: list[str] | None = None


class PersonnelOut(RecordOut):
    first_name: str
    last_name: str
    email: str | None
    phone: str | None
    personnel_type: uuid.UUID
    status: PersonnelStatus
    skills: list[str]


class ContractResource(ApiModel):
    resource: uuid.UUID
    quantity: int = Field(default=1, ge=1)


class ContractProvider(ApiModel):
    provider: uuid.UUID
    service_description: str | None = None
    cost: float = Field(default=0, ge=0)


class ContractPerson(ApiModel):
    person: uuid.UUID
    role: str | None = None
    hours: float = Field(default=0, ge=0)


class ContractCreate(DateRange):
    name: Name
    client_name: Name
    client_phone: str | None = Field(
        default=None, pattern=r"^[+]?[(]?\d{1,4}[)]?[-\s.]?\d{1,4}[-\s.]?\d{1,9}$"
    )
    client_email: EmailStr
    start_date: Timestamp
    end_date: Timestamp
    budget: float | None = Field(default=None, ge=0)
    status: ContractStatus = ContractStatus.borrador
    terms: str | None = None
    resources: list[ContractResource] = Field(default_factory=list)
    providers: list[ContractProvider] = Field(default_factory=list)
    personnel: list[ContractPerson] = Field(default_factory=list)


class ContractUpdate(DateRange):
    name: Name | None = None
    client_name: Name | None = None
    client_phone: str | None = Field(
        default=None, pattern=r"^[+]?[(]?\d{1,4}[)]?[-\s.]?\d{1,4}[-\s.]?\d{1,9}$"
    )
    client_email: EmailStr | None = None
    start_date: Timestamp | None = None
    end_date: Timestamp | None = None
    budget: float | None = Field(default=None, ge=0)
    status: ContractStatus | None = None
    terms: str | None = None
    resources: list[ContractResource] | None = None
    providers: list[ContractProvider] | None = None
    personnel: list[ContractPerson] | None = None


class ContractOut(RecordOut):
    name: str
    client_name: str
    client_phone: str | None
    client_email: str
    start_date: Timestamp
    end_date: Timestamp
    budget: float | None
    status: ContractStatus
    terms: str | None
    resources: list[ContractResource]
    providers: list[ContractProvider]
    personnel: list[ContractPerson]
    created_by: uuid.UUID | None


class EventCreate(DateRange):
    name: Name
    description: str = Field(min_length=1)
    location: Name
    event_type: uuid.UUID
    contract: uuid.UUID
    responsable: uuid.UUID
    start_date: Timestamp
    end_date: Timestamp
    status: EventStatus = EventStatus.planificado


class EventUpdate(DateRange):
    name: Name | None = None
    description: str | None = Field(default=None, min_length=1)
    location: Name | None = None
    event_type: uuid.UUID | None = None
    contract: uuid.UUID | None = None
    responsable: uuid.UUID | None = None
    start_date: Timestamp | None = None
    end_date: Timestamp | None = None
    status: EventStatus | None = None


class EventOut(RecordOut):
    name: str
    description: str
    location: str
    event_type: uuid.UUID
    contract: uuid.UUID
    responsable: uuid.UUID
    start_date: Timestamp
    end_date: Timestamp
    status: EventStatus
    created_by: uuid.UUID | None


class ReportCreate(ApiModel):
    title: Name
    description: str | None = None
    type: ReportType
    data: Any = None


class ReportUpdate(ApiModel):
    title: Name | None = None
    description: str | None = None
    type: ReportType | None = None
    data: Any = None


class ReportOut(RecordOut):
    title: str
    description: str | None
    type: ReportType
    data: Any
    created_by: uuid.UUID | None


def dump(model: type[ApiModel], obj: Any) -> dict[str, Any]:
    return model.model_validate(obj).model_dump(mode="json", by_alias=True)


# --- Module Notes -----------------------------------------------------------
# Update models are partial: handlers apply `model_dump(exclude_unset=True)`,
# so PUT and PATCH both leave omitted fields untouched.
