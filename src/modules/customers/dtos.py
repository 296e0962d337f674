"""Customer aggregate DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (views) and the Service
layer.  DTOs are immutable (``frozen=True``).

- ``CreateCustomerDTO``: customer fields plus the initial projects, users
  and warehouse assignments.
- ``UpdateCustomerDTO``: partial customer fields; every child collection
  that is supplied replaces the stored one wholesale.

Required-field and business-rule checks happen in the service so that
every violated rule is reported together.  The DTOs only enforce shape.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from modules.core.constants import RecordStatus


class CustomerFieldsDTO(BaseModel):
    """Scalar customer fields.  All optional here; see ``CustomerService``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    lookup_code: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    status: Optional[int] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v not in RecordStatus.values:
            raise ValueError("Invalid status value")
        return v

    @field_validator("phone", "email", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ProjectDTO(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    lookup_code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    is_default: bool = False


class UserDTO(BaseModel):
    """A tenant user.  ``role`` is accepted but always stored as ``CLIENT``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    email: EmailStr
    password: Optional[str] = None
    role: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class CreateCustomerDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer: CustomerFieldsDTO
    projects: List[ProjectDTO] = Field(default_factory=list)
    users: List[UserDTO] = Field(default_factory=list)
    warehouse_ids: List[int] = Field(default_factory=list)


class UpdateCustomerDTO(BaseModel):
    """Partial update.  ``None`` means "leave unchanged"; ``[]`` means "remove all"."""

    model_config = ConfigDict(frozen=True)

    customer: Optional[CustomerFieldsDTO] = None
    projects: Optional[List[ProjectDTO]] = None
    users: Optional[List[UserDTO]] = None
    warehouse_ids: Optional[List[int]] = None
    version: Optional[int] = None
