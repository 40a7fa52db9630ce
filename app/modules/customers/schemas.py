from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.common.validators import normalize_gstin, validate_gstin


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class CustomerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    gstin: Optional[str] = Field(None, max_length=20)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('El nombre del cliente es obligatorio')
        return v

    @field_validator('email', mode='before')
    @classmethod
    def empty_email(cls, v):
        v = _blank_to_none(v)
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator('phone', 'address', mode='before')
    @classmethod
    def strip_text(cls, v):
        v = _blank_to_none(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator('gstin', mode='before')
    @classmethod
    def check_gstin(cls, v):
        v = normalize_gstin(v)
        if v is not None and not validate_gstin(v):
            raise ValueError('GSTIN inválido')
        return v


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(CustomerBase):
    """Todos los campos opcionales; los omitidos conservan su valor."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('El nombre del cliente no puede estar vacío')
        return v


class CustomerOut(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CustomerList(BaseModel):
    customers: List[CustomerOut]
    count: int
    limit: int
    offset: int
