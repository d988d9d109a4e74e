"""
Schemas Pydantic para os visitantes.
"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, field_validator

from igreja_api.schemas.pessoa import validar_nome_completo, validar_telefone


class VisitanteCreate(BaseModel):
    nome_completo: str
    whatsapp: Optional[str] = None
    data_nascimento: Optional[dt.date] = None
    eh_cristao: bool = False
    mora_perto: bool = False
    igreja_origem: Optional[str] = None
    forma_conhecimento_id: Optional[int] = None
    observacoes: Optional[str] = None
    avisos_organizador: Optional[str] = None
    data_visita: dt.date
    culto_id: Optional[int] = None

    @field_validator("nome_completo")
    @classmethod
    def nome_valido(cls, v: str) -> str:
        return validar_nome_completo(v)

    @field_validator("whatsapp")
    @classmethod
    def whatsapp_valido(cls, v: Optional[str]) -> Optional[str]:
        return validar_telefone(v)


class VisitanteUpdate(BaseModel):
    nome_completo: Optional[str] = None
    whatsapp: Optional[str] = None
    data_nascimento: Optional[dt.date] = None
    eh_cristao: Optional[bool] = None
    mora_perto: Optional[bool] = None
    igreja_origem: Optional[str] = None
    forma_conhecimento_id: Optional[int] = None
    observacoes: Optional[str] = None
    avisos_organizador: Optional[str] = None
    data_visita: Optional[dt.date] = None
    culto_id: Optional[int] = None

    @field_validator("nome_completo")
    @classmethod
    def nome_valido(cls, v: Optional[str]) -> Optional[str]:
        return validar_nome_completo(v) if v is not None else v

    @field_validator("whatsapp")
    @classmethod
    def whatsapp_valido(cls, v: Optional[str]) -> Optional[str]:
        return validar_telefone(v)


class VisitanteResponse(BaseModel):
    id: int
    nome_completo: str
    whatsapp: Optional[str] = None
    data_nascimento: Optional[dt.date] = None
    eh_cristao: bool
    mora_perto: bool
    igreja_origem: Optional[str] = None
    forma_conhecimento_id: Optional[int] = None
    observacoes: Optional[str] = None
    avisos_organizador: Optional[str] = None
    data_visita: dt.date
    culto_id: Optional[int] = None
    cadastrado_por: Optional[int] = None
    created_at: Optional[dt.datetime] = None

    model_config = {"from_attributes": True}


class VisitanteEstatisticas(BaseModel):
    total: int
    hoje: int
    mes: int
    ano: int
    cristaos: int
    nao_cristaos: int
    percentual_cristaos: int
