import logging
from typing import Dict
from fastapi import HTTPException, status
from sqlalchemy import update, cast, Integer, String
from sqlalchemy.orm import Session

from app.database.database import transaction
from app.modules.settings.models import Setting, NEXT_INVOICE_NUMBER_KEY

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, str] = {
    "company_name": "",
    "company_address": "",
    "gstin": "",
    "seller_email": "",
    "seller_phone": "",
    "invoice_footer": "",
    NEXT_INVOICE_NUMBER_KEY: "1",
}


def increment_invoice_counter(db: Session) -> None:
    """
    Avanzar el contador de facturas en una unidad.

    Se ejecuta dentro de la transacción de creación de la factura, de modo
    que un rollback también deshace el incremento.
    """
    result = db.execute(
        update(Setting)
        .where(Setting.key == NEXT_INVOICE_NUMBER_KEY)
        .values(value=cast(cast(Setting.value, Integer) + 1, String))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.add(Setting(
            key=NEXT_INVOICE_NUMBER_KEY,
            value=str(int(DEFAULT_SETTINGS[NEXT_INVOICE_NUMBER_KEY]) + 1)
        ))
        db.flush()


class SettingsService:
    def __init__(self, db: Session):
        self.db = db

    def ensure_defaults(self) -> int:
        """Crear las claves por defecto que falten. Retorna cuántas se crearon."""
        existing = {key for (key,) in self.db.query(Setting.key).all()}
        created = 0
        with transaction(self.db):
            for key, value in DEFAULT_SETTINGS.items():
                if key not in existing:
                    self.db.add(Setting(key=key, value=value))
                    created += 1
        if created:
            logger.info(f"Seeded {created} default settings")
        return created

    def get_all(self) -> Dict[str, str]:
        """Todas las configuraciones como diccionario clave -> valor"""
        rows = self.db.query(Setting).order_by(Setting.key).all()
        return {row.key: row.value for row in rows}

    def get_setting(self, key: str) -> Setting:
        setting = self.db.query(Setting).filter(Setting.key == key).first()
        if not setting:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Configuración no encontrada"
            )
        return setting

    def _validate(self, key: str, value: str):
        if key == NEXT_INVOICE_NUMBER_KEY and not (value.isascii() and value.isdigit() and int(value) > 0):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{NEXT_INVOICE_NUMBER_KEY} debe ser un entero positivo"
            )

    def _upsert(self, key: str, value: str) -> Setting:
        setting = self.db.query(Setting).filter(Setting.key == key).first()
        if setting:
            setting.value = value
        else:
            setting = Setting(key=key, value=value)
            self.db.add(setting)
        return setting

    def upsert_setting(self, key: str, value: str) -> Setting:
        """Crear o actualizar una configuración"""
        self._validate(key, value)
        with transaction(self.db):
            setting = self._upsert(key, value)
        self.db.refresh(setting)
        logger.info(f"Setting {key} updated")
        return setting

    def bulk_upsert(self, values: Dict[str, str]) -> Dict[str, str]:
        """Actualizar varias configuraciones en una sola transacción"""
        for key, value in values.items():
            self._validate(key, value)
        try:
            with transaction(self.db):
                for key, value in values.items():
                    self._upsert(key, value)
        except Exception as e:
            logger.error(f"Bulk settings update failed: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error actualizando configuraciones"
            )
        logger.info(f"Bulk update of {len(values)} settings")
        return self.get_all()
