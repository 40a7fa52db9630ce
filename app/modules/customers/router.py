"""
Router para el módulo de Clientes

Todos los endpoints requieren autenticación.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from sqlalchemy.orm import Session
from typing import Optional

from app.database.database import get_db
from app.core.config import settings
from app.modules.auth.dependencies import get_auth_context
from app.modules.auth.schemas import AuthContext
from app.modules.customers.service import CustomerService
from app.modules.customers.schemas import CustomerCreate, CustomerUpdate, CustomerOut, CustomerList

router = APIRouter(
    prefix="/customers",
    tags=["Customers"],
    responses={404: {"description": "Not found"}}
)


@router.get("/", response_model=CustomerList)
def get_customers(
    search: Optional[str] = Query(None, description="Búsqueda por nombre, email o teléfono"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Listar clientes ordenados por nombre"""
    return CustomerService(db).get_customers(search, limit, offset)


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(
    customer_id: int = Path(..., description="ID del cliente"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Obtener un cliente por ID"""
    return CustomerService(db).get_customer_by_id(customer_id)


@router.post("/", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(
    customer_data: CustomerCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """
    Crear un nuevo cliente

    - **name**: Nombre del cliente (requerido, único)
    - **gstin**: GSTIN de 15 caracteres (opcional)
    """
    return CustomerService(db).create_customer(customer_data)


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(
    customer_data: CustomerUpdate,
    customer_id: int = Path(..., description="ID del cliente"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Actualizar un cliente existente"""
    return CustomerService(db).update_customer(customer_id, customer_data)


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: int = Path(..., description="ID del cliente"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """
    Eliminar un cliente

    Se rechaza con 409 si el cliente tiene facturas.
    """
    return CustomerService(db).delete_customer(customer_id)
