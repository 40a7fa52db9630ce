"""
Dependencias de autenticación para FastAPI.
"""
from typing import Optional
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database.database import get_db
from app.modules.auth.models import User
from app.modules.auth.schemas import AuthContext
from app.modules.auth.utils import verify_token
from app.core.config import settings

# Security scheme; the token may also arrive as a cookie
security = HTTPBearer(auto_error=False)


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if credentials and credentials.credentials:
        return credentials.credentials
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Se requiere autenticación",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Obtener usuario actual desde token JWT (header Bearer o cookie).
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudieron validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = _extract_token(request, credentials)
    payload = verify_token(token)

    user_id = payload.get("sub")
    if user_id is None or payload.get("type", "access") != "access":
        raise credentials_exception
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        raise credentials_exception

    return user


def get_auth_context(user: User = Depends(get_current_user)) -> AuthContext:
    """
    Contexto de autenticación: identidad que consumen los servicios.
    """
    return AuthContext(
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role
    )


def require_admin(auth_context: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Dependencia para requerir rol admin."""
    if not auth_context.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Se requiere rol de administrador"
        )
    return auth_context
