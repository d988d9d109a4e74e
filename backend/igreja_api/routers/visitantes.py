"""
Router de visitantes.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import Paginacao, get_ator, get_paginacao, require_permissions, traduzir_erro
from igreja_api.schemas.common import ApiResponse, MessageResponse
from igreja_api.schemas.visitante import (
    VisitanteCreate,
    VisitanteEstatisticas,
    VisitanteResponse,
    VisitanteUpdate,
)
from igreja_api.services import visitante_service
from igreja_api.services.audit_service import Ator

router = APIRouter(prefix="/api/visitantes", tags=["Visitantes"])

leitura = Depends(require_permissions("read_visitantes", "manage_visitantes"))
gerenciar = Depends(require_permissions("manage_visitantes"))


@router.get("", response_model=ApiResponse[List[VisitanteResponse]], dependencies=[leitura])
def list_visitantes(
    busca: Optional[str] = None,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    culto_id: Optional[int] = None,
    eh_cristao: Optional[bool] = None,
    paginacao: Paginacao = Depends(get_paginacao),
    db: Session = Depends(get_db),
):
    visitantes, pagination = visitante_service.list_visitantes(
        db, paginacao.page, paginacao.limit,
        busca=busca, data_inicio=data_inicio, data_fim=data_fim, culto_id=culto_id, eh_cristao=eh_cristao,
    )
    return ApiResponse(data=visitantes, pagination=pagination)


@router.get("/estatisticas", response_model=ApiResponse[VisitanteEstatisticas], dependencies=[leitura])
def get_estatisticas(db: Session = Depends(get_db)):
    return ApiResponse(data=visitante_service.get_estatisticas(db))


@router.get("/{visitante_id}", response_model=ApiResponse[VisitanteResponse], dependencies=[leitura])
def get_visitante(visitante_id: int, db: Session = Depends(get_db)):
    visitante = visitante_service.get_visitante(db, visitante_id)
    if visitante is None:
        raise HTTPException(status_code=404, detail="Visitante não encontrado")
    return ApiResponse(data=visitante)


@router.post("", response_model=ApiResponse[VisitanteResponse], status_code=201, dependencies=[gerenciar])
def create_visitante(data: VisitanteCreate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        visitante = visitante_service.create_visitante(db, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=visitante, message="Visitante cadastrado com sucesso")


@router.put("/{visitante_id}", response_model=ApiResponse[VisitanteResponse], dependencies=[gerenciar])
def update_visitante(
    visitante_id: int, data: VisitanteUpdate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)
):
    try:
        visitante = visitante_service.update_visitante(db, visitante_id, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if visitante is None:
        raise HTTPException(status_code=404, detail="Visitante não encontrado")
    return ApiResponse(data=visitante, message="Visitante atualizado com sucesso")


@router.delete("/{visitante_id}", response_model=MessageResponse, dependencies=[gerenciar])
def delete_visitante(visitante_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    success = visitante_service.delete_visitante(db, visitante_id, ator)
    if not success:
        raise HTTPException(status_code=404, detail="Visitante não encontrado")
    return MessageResponse(message="Visitante excluído com sucesso")
