"""
Router de escalas : atribuição de pessoas a funções nos cultos e
transições de status (confirmar, check-in, ausente, cancelar).
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import Paginacao, get_ator, get_paginacao, require_permissions, traduzir_erro
from igreja_api.schemas.common import ApiResponse, MessageResponse
from igreja_api.schemas.escala import (
    EscalaCancelar,
    EscalaCreate,
    EscalaEstatisticas,
    EscalaResponse,
    EscalaUpdate,
)
from igreja_api.services import escala_service
from igreja_api.services.audit_service import Ator

router = APIRouter(prefix="/api/escalas", tags=["Escalas"])

leitura = Depends(require_permissions("read_escalas", "manage_escalas"))
gerenciar = Depends(require_permissions("manage_escalas"))


@router.get("", response_model=ApiResponse[List[EscalaResponse]], dependencies=[leitura])
def list_escalas(
    culto_id: Optional[int] = None,
    pessoa_id: Optional[int] = None,
    funcao_id: Optional[int] = None,
    status: Optional[str] = None,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    paginacao: Paginacao = Depends(get_paginacao),
    db: Session = Depends(get_db),
):
    escalas, pagination = escala_service.list_escalas(
        db, paginacao.page, paginacao.limit,
        culto_id=culto_id, pessoa_id=pessoa_id, funcao_id=funcao_id, status=status,
        data_inicio=data_inicio, data_fim=data_fim,
    )
    return ApiResponse(data=escalas, pagination=pagination)


@router.get("/estatisticas", response_model=ApiResponse[EscalaEstatisticas], dependencies=[leitura])
def get_estatisticas(culto_id: Optional[int] = None, db: Session = Depends(get_db)):
    return ApiResponse(data=escala_service.get_estatisticas(db, culto_id))


@router.get("/pessoa/{pessoa_id}", response_model=ApiResponse[List[EscalaResponse]], dependencies=[leitura])
def list_por_pessoa(pessoa_id: int, apenas_futuras: bool = False, db: Session = Depends(get_db)):
    try:
        escalas = escala_service.list_por_pessoa(db, pessoa_id, apenas_futuras)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=escalas)


@router.get("/{escala_id}", response_model=ApiResponse[EscalaResponse], dependencies=[leitura])
def get_escala(escala_id: int, db: Session = Depends(get_db)):
    escala = escala_service.get_escala(db, escala_id)
    if escala is None:
        raise HTTPException(status_code=404, detail="Escala não encontrada")
    return ApiResponse(data=escala)


@router.post("", response_model=ApiResponse[EscalaResponse], status_code=201, dependencies=[gerenciar])
def create_escala(data: EscalaCreate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    """
    Escala uma pessoa numa função de um culto (status inicial `pendente`).
    A mesma pessoa não pode ter duas escalas ativas para a mesma função no mesmo culto.
    """
    try:
        escala = escala_service.create_escala(db, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=escala, message="Escala criada com sucesso")


@router.put("/{escala_id}", response_model=ApiResponse[EscalaResponse], dependencies=[gerenciar])
def update_escala(
    escala_id: int, data: EscalaUpdate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)
):
    try:
        escala = escala_service.update_escala(db, escala_id, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if escala is None:
        raise HTTPException(status_code=404, detail="Escala não encontrada")
    return ApiResponse(data=escala, message="Escala atualizada com sucesso")


@router.delete("/{escala_id}", response_model=MessageResponse, dependencies=[gerenciar])
def delete_escala(escala_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        success = escala_service.delete_escala(db, escala_id, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if not success:
        raise HTTPException(status_code=404, detail="Escala não encontrada")
    return MessageResponse(message="Escala excluída com sucesso")


# --- Transições de status ---

@router.patch("/{escala_id}/confirmar", response_model=ApiResponse[EscalaResponse], dependencies=[gerenciar])
def confirmar(escala_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        escala = escala_service.confirmar(db, escala_id, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=escala, message="Escala confirmada com sucesso")


@router.patch("/{escala_id}/check-in", response_model=ApiResponse[EscalaResponse], dependencies=[gerenciar])
def check_in(escala_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        escala = escala_service.check_in(db, escala_id, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=escala, message="Check-in realizado com sucesso")


@router.patch("/{escala_id}/ausente", response_model=ApiResponse[EscalaResponse], dependencies=[gerenciar])
def marcar_ausente(escala_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        escala = escala_service.marcar_ausente(db, escala_id, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=escala, message="Ausência registrada")


@router.patch("/{escala_id}/cancelar", response_model=ApiResponse[EscalaResponse], dependencies=[gerenciar])
def cancelar(
    escala_id: int,
    data: Optional[EscalaCancelar] = None,
    db: Session = Depends(get_db),
    ator: Ator = Depends(get_ator),
):
    motivo = data.motivo if data is not None else None
    try:
        escala = escala_service.cancelar(db, escala_id, motivo, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=escala, message="Escala cancelada com sucesso")
