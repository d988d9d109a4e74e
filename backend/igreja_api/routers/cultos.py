"""
Router de cultos, com detecção de conflito de horário por local.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import Paginacao, get_ator, get_paginacao, require_permissions, traduzir_erro
from igreja_api.schemas.common import ApiResponse, MessageResponse
from igreja_api.schemas.culto import (
    CultoCreate,
    CultoDetalhe,
    CultoResponse,
    CultoStatusUpdate,
    CultoUpdate,
)
from igreja_api.services import culto_service
from igreja_api.services.audit_service import Ator

router = APIRouter(prefix="/api/cultos", tags=["Cultos"])


@router.get(
    "",
    response_model=ApiResponse[List[CultoResponse]],
    dependencies=[Depends(require_permissions("read_cultos", "manage_cultos"))],
    summary="Listar cultos",
)
def list_cultos(
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    tipo_culto_id: Optional[int] = None,
    status: Optional[str] = None,
    busca: Optional[str] = None,
    paginacao: Paginacao = Depends(get_paginacao),
    db: Session = Depends(get_db),
):
    cultos, pagination = culto_service.list_cultos(
        db, paginacao.page, paginacao.limit,
        data_inicio=data_inicio, data_fim=data_fim, tipo_culto_id=tipo_culto_id, status=status, busca=busca,
    )
    return ApiResponse(data=cultos, pagination=pagination)


@router.get(
    "/{culto_id}",
    response_model=ApiResponse[CultoDetalhe],
    dependencies=[Depends(require_permissions("read_cultos", "manage_cultos"))],
    summary="Detalhe de um culto com suas escalas",
)
def get_culto(culto_id: int, db: Session = Depends(get_db)):
    culto = culto_service.get_culto(db, culto_id)
    if culto is None:
        raise HTTPException(status_code=404, detail="Culto não encontrado")
    return ApiResponse(data=culto)


@router.post(
    "",
    response_model=ApiResponse[CultoResponse],
    status_code=201,
    dependencies=[Depends(require_permissions("create_cultos", "manage_cultos"))],
    summary="Criar culto",
)
def create_culto(data: CultoCreate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    """
    Cria um culto com status `planejado`.
    Retorna 409 (com o culto conflitante) se outro culto ocupa o mesmo
    local num horário sobreposto.
    """
    try:
        culto = culto_service.create_culto(db, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=culto, message="Culto criado com sucesso")


@router.put(
    "/{culto_id}",
    response_model=ApiResponse[CultoResponse],
    dependencies=[Depends(require_permissions("update_cultos", "manage_cultos"))],
    summary="Atualizar culto",
)
def update_culto(
    culto_id: int, data: CultoUpdate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)
):
    try:
        culto = culto_service.update_culto(db, culto_id, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if culto is None:
        raise HTTPException(status_code=404, detail="Culto não encontrado")
    return ApiResponse(data=culto, message="Culto atualizado com sucesso")


@router.delete(
    "/{culto_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_permissions("delete_cultos", "manage_cultos"))],
    summary="Excluir culto",
)
def delete_culto(culto_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    """Exclusão lógica, recusada para cultos encerrados ou que já aconteceram."""
    try:
        success = culto_service.delete_culto(db, culto_id, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if not success:
        raise HTTPException(status_code=404, detail="Culto não encontrado")
    return MessageResponse(message="Culto excluído com sucesso")


@router.patch(
    "/{culto_id}/status",
    response_model=ApiResponse[CultoResponse],
    dependencies=[Depends(require_permissions("update_cultos", "manage_cultos"))],
    summary="Alterar o status do culto",
)
def update_status(
    culto_id: int, data: CultoStatusUpdate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)
):
    try:
        culto = culto_service.update_status(db, culto_id, data.status, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if culto is None:
        raise HTTPException(status_code=404, detail="Culto não encontrado")
    return ApiResponse(data=culto, message="Status do culto atualizado com sucesso")
