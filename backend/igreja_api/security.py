"""
Primitivas de segurança : hash de senha (bcrypt via passlib) e tokens JWT (python-jose).
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from igreja_api.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenInvalidoError(Exception):
    """Token JWT malformado, com assinatura inválida ou sem o campo id."""


class TokenExpiradoError(TokenInvalidoError):
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compara a senha em texto plano com o hash armazenado."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Hash corrompido ou em formato desconhecido
        return False


def create_access_token(usuario_id: int, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"id": usuario_id, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> int:
    """
    Decodifica o token e retorna o id do usuário.
    Levanta TokenExpiradoError ou TokenInvalidoError.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenExpiradoError("Token expirado") from e
    except JWTError as e:
        raise TokenInvalidoError("Token inválido") from e

    usuario_id = payload.get("id")
    if not isinstance(usuario_id, int):
        raise TokenInvalidoError("Token inválido")
    return usuario_id
