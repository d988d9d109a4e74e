"""
Schemas Pydantic para usuários e autenticação.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, field_validator

from igreja_api.schemas.perfil import PerfilResumo

SENHA_MIN = 6


def _validar_senha(v: str) -> str:
    if len(v) < SENHA_MIN:
        raise ValueError(f"A senha deve ter pelo menos {SENHA_MIN} caracteres.")
    return v


class UsuarioCreate(BaseModel):
    email: EmailStr
    senha: str
    perfil_id: int
    pessoa_id: Optional[int] = None
    ativo: bool = True

    @field_validator("email")
    @classmethod
    def email_minusculo(cls, v: str) -> str:
        return v.lower()

    @field_validator("senha")
    @classmethod
    def senha_valida(cls, v: str) -> str:
        return _validar_senha(v)


class UsuarioUpdate(BaseModel):
    email: Optional[EmailStr] = None
    perfil_id: Optional[int] = None
    pessoa_id: Optional[int] = None
    ativo: Optional[bool] = None
    email_verificado: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def email_minusculo(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class SenhaUpdate(BaseModel):
    """Troca da própria senha : exige a senha atual."""
    senha_atual: str
    nova_senha: str

    @field_validator("nova_senha")
    @classmethod
    def senha_valida(cls, v: str) -> str:
        return _validar_senha(v)


class SenhaReset(BaseModel):
    """Redefinição administrativa de senha."""
    nova_senha: str

    @field_validator("nova_senha")
    @classmethod
    def senha_valida(cls, v: str) -> str:
        return _validar_senha(v)


class UsuarioResponse(BaseModel):
    id: int
    email: str
    perfil_id: int
    perfil: Optional[PerfilResumo] = None
    pessoa_id: Optional[int] = None
    nome: Optional[str] = None  # nome_completo da pessoa vinculada
    ativo: bool
    email_verificado: bool
    ultimo_login: Optional[datetime] = None
    bloqueado_ate: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UsuarioMe(UsuarioResponse):
    permissoes: List[str] = []


class LoginRequest(BaseModel):
    email: str
    senha: str

    @field_validator("email")
    @classmethod
    def email_normalizado(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("Email é obrigatório.")
        return v

    @field_validator("senha")
    @classmethod
    def senha_obrigatoria(cls, v: str) -> str:
        if not v:
            raise ValueError("Senha é obrigatória.")
        return v


class LoginResponse(BaseModel):
    token: str
    usuario: UsuarioMe


class VerifyResponse(BaseModel):
    valid: bool
    usuario: UsuarioMe


class UsuarioEstatisticas(BaseModel):
    total: int
    ativos: int
    inativos: int
    bloqueados: int
    nunca_logaram: int
