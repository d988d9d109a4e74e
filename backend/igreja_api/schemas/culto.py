"""
Schemas Pydantic para os cultos.

Nota : datetime é importado como módulo (dt) para evitar conflito de nomes
entre o campo `data_culto` e o tipo `datetime.date` no Pydantic v2.
"""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, field_validator, model_validator

from igreja_api.models.culto import STATUS_CULTO
from igreja_api.schemas.escala import EscalaResponse


class CultoCreate(BaseModel):
    titulo: str
    descricao: Optional[str] = None
    data_culto: dt.date
    horario_inicio: dt.time
    horario_fim: Optional[dt.time] = None
    local: str = "Templo Principal"
    tipo_culto_id: int
    observacoes: Optional[str] = None

    @field_validator("titulo", "local")
    @classmethod
    def nao_vazio(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("O campo não pode ser vazio.")
        return v.strip()

    @model_validator(mode="after")
    def fim_apos_inicio(self) -> "CultoCreate":
        if self.horario_fim is not None and self.horario_fim < self.horario_inicio:
            raise ValueError("O horário de fim deve ser posterior ao horário de início.")
        return self


class CultoUpdate(BaseModel):
    titulo: Optional[str] = None
    descricao: Optional[str] = None
    data_culto: Optional[dt.date] = None
    horario_inicio: Optional[dt.time] = None
    horario_fim: Optional[dt.time] = None
    local: Optional[str] = None
    tipo_culto_id: Optional[int] = None
    observacoes: Optional[str] = None

    @field_validator("titulo", "local")
    @classmethod
    def nao_vazio(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("O campo não pode ser vazio.")
        return v.strip() if v else v


class CultoStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def status_valido(cls, v: str) -> str:
        if v not in STATUS_CULTO:
            raise ValueError(f"Status inválido. Valores aceitos : {', '.join(STATUS_CULTO)}")
        return v


class CultoResumo(BaseModel):
    """Resumo de um culto, usado no detalhe de um conflito de horário."""
    id: int
    titulo: str
    data_culto: dt.date
    horario_inicio: dt.time
    horario_fim: Optional[dt.time] = None
    local: str

    model_config = {"from_attributes": True}


class CultoResponse(BaseModel):
    id: int
    titulo: str
    descricao: Optional[str] = None
    data_culto: dt.date
    horario_inicio: dt.time
    horario_fim: Optional[dt.time] = None
    local: str
    tipo_culto_id: int
    tipo_culto_nome: Optional[str] = None
    status: str
    observacoes: Optional[str] = None
    total_escalas: int = 0
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class CultoDetalhe(CultoResponse):
    escalas: List[EscalaResponse] = []
