from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.database import get_db
from app.modules.auth.dependencies import get_auth_context, require_admin
from app.modules.auth.schemas import AuthContext
from app.modules.settings.service import SettingsService
from app.modules.settings.schemas import SettingValue, SettingOut, SettingsBulkUpdate, SettingsMap

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/", response_model=SettingsMap)
def get_settings(
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Obtener todas las configuraciones"""
    return SettingsMap(settings=SettingsService(db).get_all())


@router.post("/bulk", response_model=SettingsMap)
def bulk_update_settings(
    data: SettingsBulkUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_admin)
):
    """
    Actualizar varias configuraciones a la vez (solo administradores)
    """
    return SettingsMap(settings=SettingsService(db).bulk_upsert(data.settings))


@router.get("/{key}", response_model=SettingOut)
def get_setting(
    key: str,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Obtener una configuración por clave"""
    return SettingsService(db).get_setting(key)


@router.put("/{key}", response_model=SettingOut)
def update_setting(
    key: str,
    data: SettingValue,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_admin)
):
    """
    Crear o actualizar una configuración (solo administradores)
    """
    return SettingsService(db).upsert_setting(key, data.value)
