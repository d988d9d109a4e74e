"""
Registro da trilha de auditoria (logs_auditoria).

Toda ação de escrita bem-sucedida chama `record`. Uma falha ao gravar o log
é registrada no logger e nunca interrompe nem desfaz a operação principal.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from igreja_api.models.auditoria import LogAuditoria

logger = logging.getLogger(__name__)

OPERACOES = {"CREATE", "UPDATE", "DELETE", "LOGIN", "LOGOUT"}

# Colunas nunca copiadas para o log
CAMPOS_SENSIVEIS = {"senha_hash"}


@dataclass(frozen=True)
class Ator:
    """Quem executa a ação e de onde (usuário, IP, user agent)."""
    usuario_id: Optional[int] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None


def snapshot(obj: Any) -> Optional[dict]:
    """Retorna as colunas de um modelo como dict serializável em JSON."""
    table = getattr(type(obj), "__table__", None)
    if table is None:
        return None
    dados = {
        col.name: getattr(obj, col.name, None)
        for col in table.columns
        if col.name not in CAMPOS_SENSIVEIS
    }
    return jsonable_encoder(dados)


def record(
    db: Session,
    ator: Optional[Ator],
    tabela: str,
    operacao: str,
    registro_id: Optional[int] = None,
    dados_anteriores: Optional[dict] = None,
    dados_novos: Optional[dict] = None,
) -> None:
    """
    Grava uma entrada de auditoria numa unidade de trabalho própria.
    Deve ser chamada APÓS o commit da operação principal.
    """
    ator = ator or Ator()
    try:
        if operacao not in OPERACOES:
            raise ValueError(f"Operação de auditoria inválida : {operacao}")
        db.add(LogAuditoria(
            usuario_id=ator.usuario_id,
            tabela=tabela,
            operacao=operacao,
            registro_id=registro_id,
            dados_anteriores=dados_anteriores,
            dados_novos=dados_novos,
            ip_address=ator.ip,
            user_agent=ator.user_agent,
        ))
        db.commit()
    except Exception:
        db.rollback()
        logger.error(
            "Falha ao registrar auditoria %s %s #%s", operacao, tabela, registro_id, exc_info=True
        )
