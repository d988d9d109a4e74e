"""
Schemas Pydantic para perfis e permissões.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class PermissaoResponse(BaseModel):
    id: int
    codigo: str
    nome: str
    descricao: Optional[str] = None
    modulo: str

    model_config = {"from_attributes": True}


class PerfilCreate(BaseModel):
    nome: str
    descricao: Optional[str] = None
    nivel_acesso: int = Field(1, ge=1, le=10)
    ativo: bool = True
    permissoes: Optional[List[int]] = None  # ids de permissões

    @field_validator("nome")
    @classmethod
    def nome_valido(cls, v: str) -> str:
        v = v.strip()
        if not 2 <= len(v) <= 50:
            raise ValueError("O nome do perfil deve ter entre 2 e 50 caracteres.")
        return v


class PerfilUpdate(BaseModel):
    nome: Optional[str] = None
    descricao: Optional[str] = None
    nivel_acesso: Optional[int] = Field(None, ge=1, le=10)
    ativo: Optional[bool] = None
    permissoes: Optional[List[int]] = None  # se fornecido, substitui as permissões

    @field_validator("nome")
    @classmethod
    def nome_valido(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not 2 <= len(v) <= 50:
            raise ValueError("O nome do perfil deve ter entre 2 e 50 caracteres.")
        return v


class PerfilPermissoesUpdate(BaseModel):
    """Substitui integralmente o conjunto de permissões do perfil."""
    permissao_ids: List[int]


class PerfilResponse(BaseModel):
    id: int
    nome: str
    descricao: Optional[str] = None
    nivel_acesso: int
    ativo: bool
    permissoes: List[PermissaoResponse] = []
    total_usuarios: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PerfilResumo(BaseModel):
    id: int
    nome: str
    nivel_acesso: int

    model_config = {"from_attributes": True}


class PerfilUsoItem(BaseModel):
    id: int
    nome: str
    total_usuarios: int


class PerfilEstatisticas(BaseModel):
    total: int
    ativos: int
    inativos: int
    usuarios_por_perfil: List[PerfilUsoItem]


PermissoesPorModulo = Dict[str, List[PermissaoResponse]]
