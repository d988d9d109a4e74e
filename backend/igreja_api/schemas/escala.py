"""
Schemas Pydantic para as escalas.
"""

import datetime as dt
from typing import Dict, Optional

from pydantic import BaseModel

STATUS_ESCALA = ("pendente", "confirmada", "presente", "ausente", "cancelada")


class EscalaCreate(BaseModel):
    pessoa_id: int
    funcao_id: int
    culto_id: int
    observacoes: Optional[str] = None


class EscalaUpdate(BaseModel):
    """Edição de campos : recusada quando a escala já está confirmada."""
    pessoa_id: Optional[int] = None
    funcao_id: Optional[int] = None
    observacoes: Optional[str] = None


class EscalaCancelar(BaseModel):
    motivo: Optional[str] = None


class EscalaResponse(BaseModel):
    id: int
    pessoa_id: int
    pessoa_nome: Optional[str] = None
    funcao_id: int
    funcao_nome: Optional[str] = None
    culto_id: int
    culto_titulo: Optional[str] = None
    data_culto: Optional[dt.date] = None
    status: str
    observacoes: Optional[str] = None
    confirmado_em: Optional[dt.datetime] = None
    check_in_em: Optional[dt.datetime] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class EscalaEstatisticas(BaseModel):
    total: int
    por_status: Dict[str, int]
    taxa_confirmacao: float  # % das escalas não canceladas já confirmadas ou presentes
