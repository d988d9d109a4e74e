"""
Schemas Pydantic para as atividades da programação de um culto.
"""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class AtividadePessoaIn(BaseModel):
    pessoa_id: int
    papel: Optional[str] = None
    confirmado: bool = False


class AtividadeDepartamentoIn(BaseModel):
    departamento_id: int
    papel: Optional[str] = None
    confirmado: bool = False


class AtividadeCreate(BaseModel):
    culto_id: int
    titulo: str
    descricao: Optional[str] = None
    tipo_atividade_id: Optional[int] = None
    ordem_programacao: int = Field(1, ge=1)
    horario_inicio: Optional[dt.time] = None
    duracao_estimada: Optional[int] = Field(None, ge=1)  # minutos
    observacoes: Optional[str] = None
    pessoas: List[AtividadePessoaIn] = []
    departamentos: List[AtividadeDepartamentoIn] = []

    @field_validator("titulo")
    @classmethod
    def titulo_nao_vazio(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("O título da atividade não pode ser vazio.")
        return v.strip()


class AtividadeUpdate(BaseModel):
    titulo: Optional[str] = None
    descricao: Optional[str] = None
    tipo_atividade_id: Optional[int] = None
    ordem_programacao: Optional[int] = Field(None, ge=1)
    horario_inicio: Optional[dt.time] = None
    duracao_estimada: Optional[int] = Field(None, ge=1)
    observacoes: Optional[str] = None
    pessoas: Optional[List[AtividadePessoaIn]] = None  # se fornecido, substitui a lista
    departamentos: Optional[List[AtividadeDepartamentoIn]] = None

    @field_validator("titulo")
    @classmethod
    def titulo_nao_vazio(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("O título da atividade não pode ser vazio.")
        return v.strip() if v else v


class AtividadePessoaResponse(BaseModel):
    pessoa_id: int
    nome_completo: Optional[str] = None
    papel: Optional[str] = None
    confirmado: bool


class AtividadeDepartamentoResponse(BaseModel):
    departamento_id: int
    nome: Optional[str] = None
    papel: Optional[str] = None
    confirmado: bool


class AtividadeResponse(BaseModel):
    id: int
    culto_id: int
    titulo: str
    descricao: Optional[str] = None
    tipo_atividade_id: Optional[int] = None
    ordem_programacao: int
    horario_inicio: Optional[dt.time] = None
    duracao_estimada: Optional[int] = None
    observacoes: Optional[str] = None
    pessoas: List[AtividadePessoaResponse] = []
    departamentos: List[AtividadeDepartamentoResponse] = []
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
