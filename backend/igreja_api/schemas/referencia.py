"""
Schemas Pydantic para as tabelas de referência (funções, departamentos,
cargos, tipos de culto, formas de conhecimento, tipos de atividade).
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

COR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def validar_cor(v: Optional[str]) -> Optional[str]:
    if v is not None and not COR_RE.match(v):
        raise ValueError("Cor deve estar no formato hexadecimal #RRGGBB.")
    return v.upper() if v else v


def validar_nome(v: str) -> str:
    if not v.strip():
        raise ValueError("Nome é obrigatório.")
    return v.strip()


# --- Funções ---

class FuncaoCreate(BaseModel):
    nome: str
    descricao: Optional[str] = None
    cor: Optional[str] = None
    requer_confirmacao: bool = True

    @field_validator("nome")
    @classmethod
    def nome_valido(cls, v: str) -> str:
        return validar_nome(v)

    @field_validator("cor")
    @classmethod
    def cor_valida(cls, v: Optional[str]) -> Optional[str]:
        return validar_cor(v)


class FuncaoUpdate(BaseModel):
    nome: Optional[str] = None
    descricao: Optional[str] = None
    cor: Optional[str] = None
    requer_confirmacao: Optional[bool] = None
    ativo: Optional[bool] = None

    @field_validator("nome")
    @classmethod
    def nome_valido(cls, v: Optional[str]) -> Optional[str]:
        return validar_nome(v) if v is not None else v

    @field_validator("cor")
    @classmethod
    def cor_valida(cls, v: Optional[str]) -> Optional[str]:
        return validar_cor(v)


class FuncaoResponse(BaseModel):
    id: int
    nome: str
    descricao: Optional[str] = None
    cor: Optional[str] = None
    requer_confirmacao: bool
    ativo: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# --- Departamentos ---

class DepartamentoCreate(BaseModel):
    nome: str
    descricao: Optional[str] = None
    responsavel_id: Optional[int] = None

    @field_validator("nome")
    @classmethod
    def nome_valido(cls, v: str) -> str:
        return validar_nome(v)


class DepartamentoUpdate(BaseModel):
    nome: Optional[str] = None
    descricao: Optional[str] = None
    responsavel_id: Optional[int] = None
    ativo: Optional[bool] = None

    @field_validator("nome")
    @classmethod
    def nome_valido(cls, v: Optional[str]) -> Optional[str]:
        return validar_nome(v) if v is not None else v


class DepartamentoResponse(BaseModel):
    id: int
    nome: str
    descricao: Optional[str] = None
    responsavel_id: Optional[int] = None
    ativo: bool

    model_config = {"from_attributes": True}


# --- Cargos eclesiásticos ---

class CargoResponse(BaseModel):
    id: int
    nome: str
    descricao: Optional[str] = None
    nivel_hierarquia: Optional[int] = None
    ativo: bool

    model_config = {"from_attributes": True}


# --- Tipos de culto ---

class TipoCultoCreate(BaseModel):
    nome: str
    descricao: Optional[str] = None
    cor: Optional[str] = "#FF6B35"

    @field_validator("nome")
    @classmethod
    def nome_valido(cls, v: str) -> str:
        return validar_nome(v)

    @field_validator("cor")
    @classmethod
    def cor_valida(cls, v: Optional[str]) -> Optional[str]:
        return validar_cor(v)


class TipoCultoUpdate(BaseModel):
    nome: Optional[str] = None
    descricao: Optional[str] = None
    cor: Optional[str] = None
    ativo: Optional[bool] = None

    @field_validator("nome")
    @classmethod
    def nome_valido(cls, v: Optional[str]) -> Optional[str]:
        return validar_nome(v) if v is not None else v

    @field_validator("cor")
    @classmethod
    def cor_valida(cls, v: Optional[str]) -> Optional[str]:
        return validar_cor(v)


class TipoCultoResponse(BaseModel):
    id: int
    nome: str
    descricao: Optional[str] = None
    cor: Optional[str] = None
    ativo: bool

    model_config = {"from_attributes": True}


# --- Formas de conhecimento / tipos de atividade ---

class FormaConhecimentoResponse(BaseModel):
    id: int
    nome: str
    descricao: Optional[str] = None
    ativo: bool

    model_config = {"from_attributes": True}


class TipoAtividadeResponse(BaseModel):
    id: int
    nome: str
    descricao: Optional[str] = None
    cor: Optional[str] = None
    ativo: bool

    model_config = {"from_attributes": True}
