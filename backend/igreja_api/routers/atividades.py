"""
Router das atividades da programação de um culto.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import Paginacao, get_ator, get_paginacao, require_permissions, traduzir_erro
from igreja_api.schemas.atividade import AtividadeCreate, AtividadeResponse, AtividadeUpdate
from igreja_api.schemas.common import ApiResponse, MessageResponse
from igreja_api.schemas.referencia import TipoAtividadeResponse
from igreja_api.services import atividade_service
from igreja_api.services.audit_service import Ator

router = APIRouter(prefix="/api/atividades", tags=["Atividades"])

leitura = Depends(require_permissions("read_cultos", "manage_cultos"))
gerenciar = Depends(require_permissions("manage_cultos"))


@router.get("", response_model=ApiResponse[List[AtividadeResponse]], dependencies=[leitura])
def list_atividades(
    busca: Optional[str] = None,
    culto_id: Optional[int] = None,
    tipo_atividade_id: Optional[int] = None,
    paginacao: Paginacao = Depends(get_paginacao),
    db: Session = Depends(get_db),
):
    atividades, pagination = atividade_service.list_atividades(
        db, paginacao.page, paginacao.limit,
        busca=busca, culto_id=culto_id, tipo_atividade_id=tipo_atividade_id,
    )
    return ApiResponse(data=atividades, pagination=pagination)


@router.get("/tipos", response_model=ApiResponse[List[TipoAtividadeResponse]], dependencies=[leitura])
def list_tipos(db: Session = Depends(get_db)):
    return ApiResponse(data=atividade_service.list_tipos(db))


@router.get(
    "/culto/{culto_id}",
    response_model=ApiResponse[List[AtividadeResponse]],
    dependencies=[leitura],
    summary="Programação de um culto",
)
def list_por_culto(culto_id: int, db: Session = Depends(get_db)):
    """Atividades do culto na ordem da programação."""
    try:
        atividades = atividade_service.list_por_culto(db, culto_id)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=atividades)


@router.get("/{atividade_id}", response_model=ApiResponse[AtividadeResponse], dependencies=[leitura])
def get_atividade(atividade_id: int, db: Session = Depends(get_db)):
    atividade = atividade_service.get_atividade(db, atividade_id)
    if atividade is None:
        raise HTTPException(status_code=404, detail="Atividade não encontrada")
    return ApiResponse(data=atividade)


@router.post("", response_model=ApiResponse[AtividadeResponse], status_code=201, dependencies=[gerenciar])
def create_atividade(data: AtividadeCreate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    """Cria a atividade com as pessoas e departamentos responsáveis, numa única transação."""
    try:
        atividade = atividade_service.create_atividade(db, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=atividade, message="Atividade criada com sucesso")


@router.put("/{atividade_id}", response_model=ApiResponse[AtividadeResponse], dependencies=[gerenciar])
def update_atividade(
    atividade_id: int, data: AtividadeUpdate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)
):
    try:
        atividade = atividade_service.update_atividade(db, atividade_id, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if atividade is None:
        raise HTTPException(status_code=404, detail="Atividade não encontrada")
    return ApiResponse(data=atividade, message="Atividade atualizada com sucesso")


@router.delete("/{atividade_id}", response_model=MessageResponse, dependencies=[gerenciar])
def delete_atividade(atividade_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    success = atividade_service.delete_atividade(db, atividade_id, ator)
    if not success:
        raise HTTPException(status_code=404, detail="Atividade não encontrada")
    return MessageResponse(message="Atividade excluída com sucesso")
