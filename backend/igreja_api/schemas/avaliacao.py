"""
Schemas Pydantic para as avaliações de culto (formulário público).
"""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class CriterioResponse(BaseModel):
    id: int
    nome: str
    descricao: Optional[str] = None
    ordem_exibicao: int

    model_config = {"from_attributes": True}


class NotaCriterioIn(BaseModel):
    criterio_id: int
    nota: int = Field(..., ge=1, le=5)
    comentario: Optional[str] = None


class AvaliacaoPublicaCreate(BaseModel):
    culto_id: Optional[int] = None
    nome_avaliador: Optional[str] = None
    email_avaliador: Optional[EmailStr] = None
    data_visita: dt.date
    comentario_geral: Optional[str] = None
    recomendaria: Optional[bool] = None
    criterios: List[NotaCriterioIn]

    @field_validator("criterios")
    @classmethod
    def ao_menos_um_criterio(cls, v: List[NotaCriterioIn]) -> List[NotaCriterioIn]:
        if not v:
            raise ValueError("Ao menos um critério deve ser avaliado.")
        ids = [c.criterio_id for c in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Um critério não pode ser avaliado mais de uma vez.")
        return v


class NotaCriterioResponse(BaseModel):
    criterio_id: int
    criterio_nome: Optional[str] = None
    nota: int
    comentario: Optional[str] = None


class AvaliacaoResponse(BaseModel):
    id: int
    culto_id: Optional[int] = None
    avaliador_id: Optional[int] = None
    nome_avaliador: Optional[str] = None
    email_avaliador: Optional[str] = None
    data_visita: dt.date
    comentario_geral: Optional[str] = None
    recomendaria: Optional[bool] = None
    criterios: List[NotaCriterioResponse] = []
    media: Optional[float] = None
    created_at: Optional[dt.datetime] = None


class MediaCriterio(BaseModel):
    criterio_id: int
    nome: str
    media: float
    total_respostas: int


class AvaliacaoEstatisticas(BaseModel):
    total: int
    recomendariam: int
    percentual_recomendacao: int
    medias_por_criterio: List[MediaCriterio]
