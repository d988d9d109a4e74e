"""
Router das configurações da igreja e da consulta ao log de auditoria.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import Paginacao, get_ator, get_current_user, get_paginacao, require_permissions
from igreja_api.schemas.common import ApiResponse
from igreja_api.schemas.configuracao import ConfiguracoesUpdate, LogAuditoriaResponse
from igreja_api.services import configuracao_service
from igreja_api.services.audit_service import Ator

router = APIRouter(prefix="/api/configuracoes", tags=["Configurações"])


@router.get("", response_model=ApiResponse[Dict[str, Any]], dependencies=[Depends(get_current_user)])
def obter(db: Session = Depends(get_db)):
    return ApiResponse(data=configuracao_service.obter(db))


@router.put(
    "",
    response_model=ApiResponse[Dict[str, Any]],
    dependencies=[Depends(require_permissions("manage_configuracoes"))],
)
def atualizar(data: ConfiguracoesUpdate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    """Grava somente as chaves enviadas ; as demais permanecem inalteradas."""
    configuracoes = configuracao_service.atualizar(db, data, ator)
    return ApiResponse(data=configuracoes, message="Configurações atualizadas com sucesso")


@router.get(
    "/logs",
    response_model=ApiResponse[List[LogAuditoriaResponse]],
    dependencies=[Depends(require_permissions("read_relatorios"))],
    summary="Log de auditoria",
)
def list_logs(
    tabela: Optional[str] = None,
    operacao: Optional[str] = None,
    usuario_id: Optional[int] = None,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    paginacao: Paginacao = Depends(get_paginacao),
    db: Session = Depends(get_db),
):
    logs, pagination = configuracao_service.list_logs(
        db, paginacao.page, paginacao.limit,
        tabela=tabela, operacao=operacao, usuario_id=usuario_id,
        data_inicio=data_inicio, data_fim=data_fim,
    )
    return ApiResponse(data=logs, pagination=pagination)
