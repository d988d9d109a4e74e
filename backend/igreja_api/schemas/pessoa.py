"""
Schemas Pydantic para as pessoas.

Nota : datetime é importado como módulo (dt) para evitar conflito de nomes
entre campos do tipo data e o tipo `datetime.date` no Pydantic v2.
"""

import re
import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, field_validator

TELEFONE_RE = re.compile(r"^[\d\s\(\)\-\+]+$")


def validar_telefone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        return None
    if not TELEFONE_RE.match(v):
        raise ValueError("Telefone deve conter apenas números, espaços, parênteses, hífen e +.")
    return v


def validar_nome_completo(v: str) -> str:
    v = v.strip()
    if not 2 <= len(v) <= 255:
        raise ValueError("O nome completo deve ter entre 2 e 255 caracteres.")
    return v


class PessoaCreate(BaseModel):
    nome_completo: str
    telefone: Optional[str] = None
    whatsapp: Optional[str] = None
    email: Optional[EmailStr] = None
    data_nascimento: Optional[dt.date] = None
    endereco: Optional[str] = None
    cargo_eclesiastico_id: Optional[int] = None
    departamento_id: Optional[int] = None
    membro: bool = True
    ativo: bool = True
    observacoes: Optional[str] = None

    @field_validator("nome_completo")
    @classmethod
    def nome_valido(cls, v: str) -> str:
        return validar_nome_completo(v)

    @field_validator("telefone", "whatsapp")
    @classmethod
    def telefone_valido(cls, v: Optional[str]) -> Optional[str]:
        return validar_telefone(v)

    @field_validator("data_nascimento")
    @classmethod
    def nascimento_no_passado(cls, v: Optional[dt.date]) -> Optional[dt.date]:
        if v is not None and v >= dt.date.today():
            raise ValueError("A data de nascimento deve ser anterior a hoje.")
        return v


class PessoaUpdate(BaseModel):
    nome_completo: Optional[str] = None
    telefone: Optional[str] = None
    whatsapp: Optional[str] = None
    email: Optional[EmailStr] = None
    data_nascimento: Optional[dt.date] = None
    endereco: Optional[str] = None
    cargo_eclesiastico_id: Optional[int] = None
    departamento_id: Optional[int] = None
    membro: Optional[bool] = None
    ativo: Optional[bool] = None
    observacoes: Optional[str] = None

    @field_validator("nome_completo")
    @classmethod
    def nome_valido(cls, v: Optional[str]) -> Optional[str]:
        return validar_nome_completo(v) if v is not None else v

    @field_validator("telefone", "whatsapp")
    @classmethod
    def telefone_valido(cls, v: Optional[str]) -> Optional[str]:
        return validar_telefone(v)

    @field_validator("data_nascimento")
    @classmethod
    def nascimento_no_passado(cls, v: Optional[dt.date]) -> Optional[dt.date]:
        if v is not None and v >= dt.date.today():
            raise ValueError("A data de nascimento deve ser anterior a hoje.")
        return v


class PessoaResponse(BaseModel):
    id: int
    nome_completo: str
    nome_abreviado: str
    telefone: Optional[str] = None
    whatsapp: Optional[str] = None
    email: Optional[str] = None
    data_nascimento: Optional[dt.date] = None
    idade: Optional[int] = None
    endereco: Optional[str] = None
    cargo_eclesiastico_id: Optional[int] = None
    cargo_nome: Optional[str] = None
    departamento_id: Optional[int] = None
    departamento_nome: Optional[str] = None
    usuario_id: Optional[int] = None
    membro: bool
    ativo: bool
    observacoes: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class PessoaEstatisticas(BaseModel):
    total: int
    ativos: int
    inativos: int
    membros: int
    por_cargo: Dict[str, int]
    por_departamento: Dict[str, int]
    aniversariantes_mes: List[PessoaResponse] = []
