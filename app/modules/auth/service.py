import logging
from datetime import datetime, timezone
from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_

from app.modules.auth.models import User
from app.modules.auth.schemas import UserCreate, UserOut, TokenResponse
from app.modules.auth.utils import hash_password, verify_password, create_access_token
from app.core.config import settings

logger = logging.getLogger(__name__)


class AuthService:
    """
    Servicio de autenticación: registro, login y gestión de contraseña.
    """

    def __init__(self, db: Session):
        self.db = db

    def _issue_token(self, user: User) -> TokenResponse:
        token_data = {
            "sub": str(user.id),
            "username": user.username,
            "email": user.email,
            "role": user.role
        }
        return TokenResponse(
            access_token=create_access_token(token_data),
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=UserOut.model_validate(user)
        )

    def create_user(self, user_data: UserCreate, role: str = "user") -> User:
        """
        Crear nuevo usuario.

        Returns:
            User: Usuario creado
        """
        existing_user = self.db.query(User).filter(
            or_(User.username == user_data.username, User.email == user_data.email)
        ).first()
        if existing_user:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="El nombre de usuario o el email ya están registrados"
            )

        user = User(
            username=user_data.username,
            email=user_data.email,
            password_hash=hash_password(user_data.password),
            role=role,
            is_active=True
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="El nombre de usuario o el email ya están registrados"
            )
        self.db.refresh(user)

        logger.info(f"User {user.username} registered with role {user.role}")
        return user

    def register(self, user_data: UserCreate) -> TokenResponse:
        """Registrar usuario y emitir token de acceso."""
        user = self.create_user(user_data)
        return self._issue_token(user)

    def login(self, username: str, password: str) -> TokenResponse:
        """
        Login de usuario por nombre de usuario.
        """
        user = self.db.query(User).filter(User.username == username).first()

        if not user or not verify_password(password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Usuario o contraseña incorrectos"
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Cuenta inactiva"
            )

        # Actualizar último login
        user.last_login = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(user)

        return self._issue_token(user)

    def get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Usuario no encontrado"
            )
        return user

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        """Cambiar la contraseña validando la actual."""
        user = self.get_user(user_id)

        if not verify_password(current_password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="La contraseña actual es incorrecta"
            )

        user.password_hash = hash_password(new_password)
        self.db.commit()
        logger.info(f"Password changed for user {user.username}")
