"""
Serviço de configurações da igreja e consulta do log de auditoria.

Cada chave de configuração é uma linha da tabela `configuracoes` com o
valor em JSON. Chaves ainda não gravadas assumem o valor de DEFAULTS.
"""

import copy
import logging
from datetime import date, datetime, time
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from igreja_api.models.auditoria import LogAuditoria
from igreja_api.models.configuracao import Configuracao
from igreja_api.schemas.common import PaginationInfo
from igreja_api.schemas.configuracao import ConfiguracoesUpdate, LogAuditoriaResponse
from igreja_api.services import audit_service
from igreja_api.services.audit_service import Ator
from igreja_api.services.pagination import paginate

logger = logging.getLogger(__name__)

DEFAULTS: dict[str, Any] = {
    "nome_igreja": "Igreja",
    "endereco": None,
    "telefone": None,
    "email": None,
    "site": None,
    "pastor_principal": None,
    "horarios_cultos": {
        "domingo_manha": "09:00",
        "domingo_noite": "19:00",
        "quarta_feira": "19:30",
    },
    "configuracoes_sistema": {
        "permitir_autoconfirmacao_escalas": False,
        "dias_antecedencia_escala": 7,
    },
    "redes_sociais": {},
}


def obter(db: Session) -> dict[str, Any]:
    """Retorna {chave: valor} com as linhas gravadas sobrepostas aos valores padrão."""
    configuracoes = copy.deepcopy(DEFAULTS)
    linhas = db.execute(select(Configuracao)).scalars().all()
    for linha in linhas:
        configuracoes[linha.chave] = linha.valor
    return configuracoes


def atualizar(db: Session, data: ConfiguracoesUpdate, ator: Optional[Ator] = None) -> dict[str, Any]:
    """
    Grava (insere ou atualiza) somente as chaves enviadas, numa única transação.
    O log de auditoria guarda o conjunto completo antes e depois.
    """
    changes = data.model_dump(exclude_unset=True)
    antes = obter(db)

    existentes = {
        linha.chave: linha
        for linha in db.execute(
            select(Configuracao).where(Configuracao.chave.in_(changes.keys()))
        ).scalars().all()
    }
    usuario_id = ator.usuario_id if ator else None

    for chave, valor in changes.items():
        linha = existentes.get(chave)
        if linha is None:
            db.add(Configuracao(chave=chave, valor=valor, updated_by=usuario_id))
        else:
            linha.valor = valor
            linha.updated_by = usuario_id

    db.commit()

    depois = {**antes, **changes}
    audit_service.record(db, ator, "configuracoes", "UPDATE", None, antes, depois)
    logger.info("Configurações atualizadas : %s", ", ".join(sorted(changes)))
    return depois


def list_logs(
    db: Session,
    page: int,
    limit: int,
    tabela: Optional[str] = None,
    operacao: Optional[str] = None,
    usuario_id: Optional[int] = None,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
) -> tuple[list[LogAuditoriaResponse], PaginationInfo]:
    """Consulta paginada do log de auditoria, mais recentes primeiro."""
    stmt = select(LogAuditoria)
    if tabela:
        stmt = stmt.where(LogAuditoria.tabela == tabela)
    if operacao:
        stmt = stmt.where(LogAuditoria.operacao == operacao.upper())
    if usuario_id is not None:
        stmt = stmt.where(LogAuditoria.usuario_id == usuario_id)
    if data_inicio is not None:
        stmt = stmt.where(LogAuditoria.created_at >= datetime.combine(data_inicio, time.min))
    if data_fim is not None:
        stmt = stmt.where(LogAuditoria.created_at <= datetime.combine(data_fim, time.max))

    logs, pagination = paginate(db, stmt.order_by(LogAuditoria.created_at.desc()), page, limit)
    return [LogAuditoriaResponse.model_validate(log) for log in logs], pagination
