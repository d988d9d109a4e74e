"""
Schemas Pydantic para configurações persistidas e consulta do log de auditoria.
"""

import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class LogAuditoriaResponse(BaseModel):
    id: int
    usuario_id: Optional[int] = None
    tabela: str
    operacao: str
    registro_id: Optional[int] = None
    dados_anteriores: Optional[Any] = None
    dados_novos: Optional[Any] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ConfiguracoesUpdate(BaseModel):
    """Somente as chaves enviadas são gravadas; as demais ficam como estão."""
    nome_igreja: Optional[str] = None
    endereco: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    site: Optional[str] = None
    pastor_principal: Optional[str] = None
    horarios_cultos: Optional[dict[str, Any]] = None
    configuracoes_sistema: Optional[dict[str, Any]] = None
    redes_sociais: Optional[dict[str, Any]] = None

    model_config = {"extra": "forbid"}

    @field_validator("nome_igreja")
    @classmethod
    def nome_igreja_obrigatorio(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Nome da igreja é obrigatório")
        return v.strip() if v else v

    @field_validator("email")
    @classmethod
    def email_valido(cls, v: Optional[str]) -> Optional[str]:
        if v and not EMAIL_RE.match(v):
            raise ValueError("Email inválido")
        return v
