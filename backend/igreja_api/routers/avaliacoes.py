"""
Router das avaliações de culto.

O formulário público (critérios + envio) não exige autenticação ;
a consulta das avaliações sim.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import (
    Paginacao,
    get_ator,
    get_ator_anonimo,
    get_paginacao,
    require_permissions,
    traduzir_erro,
)
from igreja_api.schemas.avaliacao import (
    AvaliacaoEstatisticas,
    AvaliacaoPublicaCreate,
    AvaliacaoResponse,
    CriterioResponse,
)
from igreja_api.schemas.common import ApiResponse, MessageResponse
from igreja_api.services import avaliacao_service
from igreja_api.services.audit_service import Ator

router = APIRouter(prefix="/api/avaliacoes", tags=["Avaliações"])

leitura = Depends(require_permissions("read_relatorios", "manage_avaliacoes"))
gerenciar = Depends(require_permissions("manage_avaliacoes"))


# ============================================================
# Rotas públicas
# ============================================================

@router.get("/criterios", response_model=ApiResponse[List[CriterioResponse]], summary="Critérios de avaliação")
def list_criterios(db: Session = Depends(get_db)):
    return ApiResponse(data=avaliacao_service.list_criterios(db))


@router.post(
    "/publica",
    response_model=ApiResponse[AvaliacaoResponse],
    status_code=201,
    summary="Enviar avaliação (formulário público)",
)
def create_avaliacao_publica(
    data: AvaliacaoPublicaCreate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator_anonimo)
):
    """
    Registra a avaliação e todas as notas (1 a 5) numa única transação.
    Um critério inexistente ou inativo rejeita o envio inteiro.
    """
    try:
        avaliacao = avaliacao_service.create_avaliacao_publica(db, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=avaliacao, message="Avaliação enviada com sucesso. Obrigado!")


# ============================================================
# Rotas autenticadas
# ============================================================

@router.get("", response_model=ApiResponse[List[AvaliacaoResponse]], dependencies=[leitura])
def list_avaliacoes(
    culto_id: Optional[int] = None,
    recomendaria: Optional[bool] = None,
    paginacao: Paginacao = Depends(get_paginacao),
    db: Session = Depends(get_db),
):
    avaliacoes, pagination = avaliacao_service.list_avaliacoes(
        db, paginacao.page, paginacao.limit, culto_id=culto_id, recomendaria=recomendaria
    )
    return ApiResponse(data=avaliacoes, pagination=pagination)


@router.get("/estatisticas", response_model=ApiResponse[AvaliacaoEstatisticas], dependencies=[leitura])
def get_estatisticas(culto_id: Optional[int] = None, db: Session = Depends(get_db)):
    return ApiResponse(data=avaliacao_service.get_estatisticas(db, culto_id))


@router.get("/{avaliacao_id}", response_model=ApiResponse[AvaliacaoResponse], dependencies=[leitura])
def get_avaliacao(avaliacao_id: int, db: Session = Depends(get_db)):
    avaliacao = avaliacao_service.get_avaliacao(db, avaliacao_id)
    if avaliacao is None:
        raise HTTPException(status_code=404, detail="Avaliação não encontrada")
    return ApiResponse(data=avaliacao)


@router.delete("/{avaliacao_id}", response_model=MessageResponse, dependencies=[gerenciar])
def delete_avaliacao(avaliacao_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    success = avaliacao_service.delete_avaliacao(db, avaliacao_id, ator)
    if not success:
        raise HTTPException(status_code=404, detail="Avaliação não encontrada")
    return MessageResponse(message="Avaliação excluída com sucesso")
