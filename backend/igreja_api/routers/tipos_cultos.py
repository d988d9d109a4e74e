"""
Router dos tipos de culto.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import get_ator, get_current_user, require_permissions, traduzir_erro
from igreja_api.schemas.common import ApiResponse
from igreja_api.schemas.referencia import TipoCultoCreate, TipoCultoResponse, TipoCultoUpdate
from igreja_api.services import referencia_service
from igreja_api.services.audit_service import Ator

router = APIRouter(prefix="/api/tipos-cultos", tags=["Tipos de culto"], dependencies=[Depends(get_current_user)])

gerenciar = Depends(require_permissions("manage_cultos"))


@router.get("", response_model=ApiResponse[List[TipoCultoResponse]])
def list_tipos_cultos(ativo: Optional[bool] = None, db: Session = Depends(get_db)):
    return ApiResponse(data=referencia_service.list_tipos_cultos(db, ativo))


@router.post("", response_model=ApiResponse[TipoCultoResponse], status_code=201, dependencies=[gerenciar])
def create_tipo_culto(data: TipoCultoCreate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        tipo = referencia_service.create_tipo_culto(db, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=tipo, message="Tipo de culto criado com sucesso")


@router.put("/{tipo_id}", response_model=ApiResponse[TipoCultoResponse], dependencies=[gerenciar])
def update_tipo_culto(
    tipo_id: int, data: TipoCultoUpdate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)
):
    try:
        tipo = referencia_service.update_tipo_culto(db, tipo_id, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if tipo is None:
        raise HTTPException(status_code=404, detail="Tipo de culto não encontrado")
    return ApiResponse(data=tipo, message="Tipo de culto atualizado com sucesso")
