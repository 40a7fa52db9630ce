"""
Servicios de negocio para el módulo de Clientes
"""

import logging
from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_, func
from typing import Optional, Dict, Any

from app.core.config import settings
from app.modules.customers.models import Customer
from app.modules.customers.schemas import CustomerCreate, CustomerUpdate, CustomerList, CustomerOut
from app.modules.invoices.models import Invoice

logger = logging.getLogger(__name__)


class CustomerService:
    """Servicio principal para gestión de clientes"""

    def __init__(self, db: Session):
        self.db = db

    def _ensure_unique_name(self, name: str, exclude_id: Optional[int] = None):
        query = self.db.query(Customer).filter(Customer.name == name)
        if exclude_id is not None:
            query = query.filter(Customer.id != exclude_id)
        if query.first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Ya existe un cliente con el nombre {name}"
            )

    def create_customer(self, customer_data: CustomerCreate) -> Customer:
        """Crear un nuevo cliente"""
        try:
            self._ensure_unique_name(customer_data.name)

            customer = Customer(**customer_data.model_dump())
            self.db.add(customer)
            self.db.commit()
            self.db.refresh(customer)

            logger.info(f"Customer {customer.id} created: {customer.name}")
            return customer

        except HTTPException:
            raise
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Ya existe un cliente con este nombre"
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating customer: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error creando cliente"
            )

    def get_customers(self, search: Optional[str] = None, limit: int = settings.DEFAULT_PAGE_SIZE, offset: int = 0) -> CustomerList:
        """Listar clientes con búsqueda opcional por nombre, email o teléfono"""
        query = self.db.query(Customer)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Customer.name.ilike(pattern),
                Customer.email.ilike(pattern),
                Customer.phone.ilike(pattern)
            ))

        customers = query.order_by(Customer.name).offset(offset).limit(limit).all()

        return CustomerList(
            customers=[CustomerOut.model_validate(c) for c in customers],
            count=len(customers),
            limit=limit,
            offset=offset
        )

    def get_customer_by_id(self, customer_id: int) -> Customer:
        """Obtener cliente por ID"""
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()

        if not customer:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cliente no encontrado"
            )

        return customer

    def update_customer(self, customer_id: int, customer_update: CustomerUpdate) -> Customer:
        """Actualizar cliente; los campos omitidos conservan su valor"""
        try:
            customer = self.get_customer_by_id(customer_id)

            update_data = customer_update.model_dump(exclude_unset=True, exclude_none=True)
            if "name" in update_data and update_data["name"] != customer.name:
                self._ensure_unique_name(update_data["name"], exclude_id=customer_id)

            for field, value in update_data.items():
                setattr(customer, field, value)

            self.db.commit()
            self.db.refresh(customer)

            return customer

        except HTTPException:
            raise
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Ya existe un cliente con este nombre"
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating customer {customer_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error actualizando cliente"
            )

    def delete_customer(self, customer_id: int) -> Dict[str, Any]:
        """Eliminar cliente. No se permite si tiene facturas asociadas."""
        customer = self.get_customer_by_id(customer_id)

        invoice_count = self.db.query(func.count(Invoice.id)).filter(
            Invoice.customer_id == customer_id
        ).scalar()

        if invoice_count:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="No se puede eliminar un cliente con facturas existentes"
            )

        try:
            self.db.delete(customer)
            self.db.commit()
        except IntegrityError:
            # Una factura creada concurrentemente mantiene la referencia
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="No se puede eliminar un cliente con facturas existentes"
            )

        logger.info(f"Customer {customer_id} deleted")
        return {"success": True, "message": "Cliente eliminado exitosamente"}
