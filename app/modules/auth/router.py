from fastapi import APIRouter, Depends, Response, status

from app.dependencies.dbDependecies import db_dependency
from app.modules.auth.service import AuthService
from app.modules.auth.dependencies import get_current_user, get_auth_context
from app.modules.auth.models import User
from app.modules.auth.schemas import (
    UserCreate, UserLogin, UserOut, TokenResponse, PasswordChange, AuthContext
)
from app.core.config import settings

auth_router = APIRouter()


def _set_auth_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="strict",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )


@auth_router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: db_dependency):
    """
    Registrar nuevo usuario. Retorna token de acceso.
    """
    auth_service = AuthService(db)
    return auth_service.register(user_data)


@auth_router.post("/login", response_model=TokenResponse)
def login(credentials: UserLogin, response: Response, db: db_dependency):
    """
    Login de usuario. Retorna token de acceso y lo deja también en una cookie httpOnly.
    """
    auth_service = AuthService(db)
    token = auth_service.login(credentials.username, credentials.password)
    _set_auth_cookie(response, token.access_token)
    return token


@auth_router.post("/logout")
def logout(response: Response, auth_context: AuthContext = Depends(get_auth_context)):
    """
    Cerrar sesión eliminando la cookie del token.
    """
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return {"success": True, "message": "Sesión cerrada"}


@auth_router.get("/me", response_model=UserOut)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """
    Obtener información del usuario actual.
    """
    return UserOut.model_validate(current_user)


@auth_router.put("/change-password")
def change_password(
    password_data: PasswordChange,
    db: db_dependency,
    auth_context: AuthContext = Depends(get_auth_context)
):
    """
    Cambiar contraseña del usuario actual.
    """
    auth_service = AuthService(db)
    auth_service.change_password(
        auth_context.user_id,
        password_data.current_password,
        password_data.new_password
    )
    return {"success": True, "message": "Contraseña actualizada"}
