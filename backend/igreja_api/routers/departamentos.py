"""
Router dos departamentos da igreja.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import get_ator, get_current_user, require_permissions, traduzir_erro
from igreja_api.schemas.common import ApiResponse
from igreja_api.schemas.referencia import DepartamentoCreate, DepartamentoResponse, DepartamentoUpdate
from igreja_api.services import referencia_service
from igreja_api.services.audit_service import Ator

router = APIRouter(
    prefix="/api/departamentos", tags=["Departamentos"], dependencies=[Depends(get_current_user)]
)

gerenciar = Depends(require_permissions("manage_pessoas"))


@router.get("", response_model=ApiResponse[List[DepartamentoResponse]])
def list_departamentos(ativo: Optional[bool] = None, db: Session = Depends(get_db)):
    return ApiResponse(data=referencia_service.list_departamentos(db, ativo))


@router.get("/{departamento_id}", response_model=ApiResponse[DepartamentoResponse])
def get_departamento(departamento_id: int, db: Session = Depends(get_db)):
    departamento = referencia_service.get_departamento(db, departamento_id)
    if departamento is None:
        raise HTTPException(status_code=404, detail="Departamento não encontrado")
    return ApiResponse(data=departamento)


@router.post("", response_model=ApiResponse[DepartamentoResponse], status_code=201, dependencies=[gerenciar])
def create_departamento(data: DepartamentoCreate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        departamento = referencia_service.create_departamento(db, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=departamento, message="Departamento criado com sucesso")


@router.put("/{departamento_id}", response_model=ApiResponse[DepartamentoResponse], dependencies=[gerenciar])
def update_departamento(
    departamento_id: int,
    data: DepartamentoUpdate,
    db: Session = Depends(get_db),
    ator: Ator = Depends(get_ator),
):
    try:
        departamento = referencia_service.update_departamento(db, departamento_id, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if departamento is None:
        raise HTTPException(status_code=404, detail="Departamento não encontrado")
    return ApiResponse(data=departamento, message="Departamento atualizado com sucesso")
