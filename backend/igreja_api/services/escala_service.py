"""
Serviço de escalas : deduplicação (pessoa, culto, função) e máquina de estados.

    pendente ──confirmar──▶ confirmada ──check_in──▶ presente
        │                      │                        │
        └──────────────┬───────┴────────────────────────┘
                       ▼
            ausente / cancelada (terminais)
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from igreja_api.models.culto import STATUS_CULTO_ENCERRADOS, Culto
from igreja_api.models.escala import Escala
from igreja_api.models.pessoa import Pessoa
from igreja_api.models.referencia import Funcao
from igreja_api.schemas.common import PaginationInfo
from igreja_api.schemas.escala import (
    STATUS_ESCALA,
    EscalaCreate,
    EscalaEstatisticas,
    EscalaResponse,
    EscalaUpdate,
)
from igreja_api.services import audit_service
from igreja_api.services.audit_service import Ator
from igreja_api.services.pagination import paginate

logger = logging.getLogger(__name__)

MSG_DUPLICADA = "Pessoa já possui escala neste culto para esta função"

# ação → (status de origem permitidos, status de destino)
TRANSICOES = {
    "confirmar": ({"pendente"}, "confirmada"),
    "check_in": ({"confirmada"}, "presente"),
    "ausente": ({"pendente", "confirmada", "presente"}, "ausente"),
    "cancelar": ({"pendente", "confirmada", "presente"}, "cancelada"),
}

# Após a confirmação, só as transições dedicadas alteram a escala
STATUS_BLOQUEADOS = {"confirmada", "presente"}


class TransicaoInvalidaError(ValueError):
    pass


def proximo_status(atual: str, acao: str) -> str:
    """Retorna o status de destino da ação ou levanta TransicaoInvalidaError."""
    origens, destino = TRANSICOES[acao]
    if atual == destino:
        raise TransicaoInvalidaError(f"A escala já está com status '{atual}'.")
    if atual not in origens:
        raise TransicaoInvalidaError(
            f"Transição inválida : não é possível passar de '{atual}' para '{destino}'."
        )
    return destino


def can_assign(
    db: Session,
    pessoa_id: int,
    culto_id: int,
    funcao_id: int,
    exclude_id: Optional[int] = None,
) -> bool:
    """
    True se nenhuma OUTRA escala não cancelada (e não excluída) existe
    para o mesmo trio (pessoa, culto, função).
    """
    stmt = select(Escala.id).where(
        Escala.pessoa_id == pessoa_id,
        Escala.culto_id == culto_id,
        Escala.funcao_id == funcao_id,
        Escala.status != "cancelada",
        Escala.deleted_at.is_(None),
    )
    if exclude_id is not None:
        stmt = stmt.where(Escala.id != exclude_id)
    return db.execute(stmt.limit(1)).scalar() is None


def list_escalas(
    db: Session,
    page: int,
    limit: int,
    culto_id: Optional[int] = None,
    pessoa_id: Optional[int] = None,
    funcao_id: Optional[int] = None,
    status: Optional[str] = None,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
) -> tuple[list[EscalaResponse], PaginationInfo]:
    stmt = (
        select(Escala)
        .join(Culto, Culto.id == Escala.culto_id)
        .where(Escala.deleted_at.is_(None), Culto.deleted_at.is_(None))
    )
    if culto_id is not None:
        stmt = stmt.where(Escala.culto_id == culto_id)
    if pessoa_id is not None:
        stmt = stmt.where(Escala.pessoa_id == pessoa_id)
    if funcao_id is not None:
        stmt = stmt.where(Escala.funcao_id == funcao_id)
    if status:
        stmt = stmt.where(Escala.status == status)
    if data_inicio is not None:
        stmt = stmt.where(Culto.data_culto >= data_inicio)
    if data_fim is not None:
        stmt = stmt.where(Culto.data_culto <= data_fim)

    escalas, pagination = paginate(
        db, stmt.order_by(Culto.data_culto.desc(), Culto.horario_inicio, Escala.id), page, limit
    )
    return [_to_response(db, e) for e in escalas], pagination


def list_escalas_do_culto(db: Session, culto_id: int) -> list[EscalaResponse]:
    escalas = db.execute(
        select(Escala)
        .where(Escala.culto_id == culto_id, Escala.deleted_at.is_(None))
        .order_by(Escala.funcao_id, Escala.id)
    ).scalars().all()
    return [_to_response(db, e) for e in escalas]


def list_por_pessoa(
    db: Session, pessoa_id: int, apenas_futuras: bool = False
) -> list[EscalaResponse]:
    """Escalas de uma pessoa, da mais recente para a mais antiga."""
    pessoa = db.get(Pessoa, pessoa_id)
    if pessoa is None or pessoa.deleted_at is not None:
        raise ValueError("Pessoa não encontrada")

    stmt = (
        select(Escala)
        .join(Culto, Culto.id == Escala.culto_id)
        .where(
            Escala.pessoa_id == pessoa_id,
            Escala.deleted_at.is_(None),
            Culto.deleted_at.is_(None),
        )
    )
    if apenas_futuras:
        stmt = stmt.where(Culto.data_culto >= date.today())

    escalas = db.execute(stmt.order_by(Culto.data_culto.desc())).scalars().all()
    return [_to_response(db, e) for e in escalas]


def get_escala(db: Session, escala_id: int) -> Optional[EscalaResponse]:
    escala = _get(db, escala_id)
    if escala is None:
        return None
    return _to_response(db, escala)


def create_escala(db: Session, data: EscalaCreate, ator: Optional[Ator] = None) -> EscalaResponse:
    """
    Escala uma pessoa numa função de um culto.

    Validações :
    1. Pessoa, função e culto existem (e não foram excluídos)
    2. O culto não está encerrado
    3. Não há outra escala não cancelada para o mesmo trio
    """
    _verificar_pessoa(db, data.pessoa_id)
    _verificar_funcao(db, data.funcao_id)
    culto = db.get(Culto, data.culto_id)
    if culto is None or culto.deleted_at is not None:
        raise ValueError("Culto não encontrado")
    if culto.status in STATUS_CULTO_ENCERRADOS:
        raise ValueError("Não é possível escalar pessoas em cultos finalizados ou cancelados")

    if not can_assign(db, data.pessoa_id, data.culto_id, data.funcao_id):
        raise ValueError(MSG_DUPLICADA)

    escala = Escala(
        pessoa_id=data.pessoa_id,
        funcao_id=data.funcao_id,
        culto_id=data.culto_id,
        observacoes=data.observacoes,
        status="pendente",
        created_by=ator.usuario_id if ator else None,
    )
    db.add(escala)
    _commit(db)
    db.refresh(escala)

    audit_service.record(db, ator, "escalas", "CREATE", escala.id, dados_novos=audit_service.snapshot(escala))
    logger.info(
        "Escala criada : pessoa %s, função %s, culto %s", data.pessoa_id, data.funcao_id, data.culto_id
    )
    return _to_response(db, escala)


def update_escala(
    db: Session, escala_id: int, data: EscalaUpdate, ator: Optional[Ator] = None
) -> Optional[EscalaResponse]:
    """Edição de campos, apenas enquanto a escala não foi confirmada."""
    escala = _get(db, escala_id)
    if escala is None:
        return None
    if escala.status in STATUS_BLOQUEADOS:
        raise ValueError("Não é possível editar escala confirmada")

    changes = data.model_dump(exclude_unset=True)
    pessoa_id = changes.get("pessoa_id") or escala.pessoa_id
    funcao_id = changes.get("funcao_id") or escala.funcao_id

    if pessoa_id != escala.pessoa_id:
        _verificar_pessoa(db, pessoa_id)
    if funcao_id != escala.funcao_id:
        _verificar_funcao(db, funcao_id)
    if (pessoa_id, funcao_id) != (escala.pessoa_id, escala.funcao_id) and escala.status != "cancelada":
        if not can_assign(db, pessoa_id, escala.culto_id, funcao_id, exclude_id=escala.id):
            raise ValueError(MSG_DUPLICADA)

    antes = audit_service.snapshot(escala)
    escala.pessoa_id = pessoa_id
    escala.funcao_id = funcao_id
    if "observacoes" in changes:
        escala.observacoes = changes["observacoes"]

    _commit(db)
    db.refresh(escala)

    audit_service.record(db, ator, "escalas", "UPDATE", escala.id, antes, audit_service.snapshot(escala))
    return _to_response(db, escala)


def delete_escala(db: Session, escala_id: int, ator: Optional[Ator] = None) -> bool:
    escala = _get(db, escala_id)
    if escala is None:
        return False
    if escala.status in STATUS_BLOQUEADOS:
        raise ValueError("Não é possível excluir escala confirmada")

    antes = audit_service.snapshot(escala)
    escala.deleted_at = datetime.now()
    db.commit()

    audit_service.record(db, ator, "escalas", "DELETE", escala.id, dados_anteriores=antes)
    logger.info("Escala excluída : %s", escala.id)
    return True


def confirmar(db: Session, escala_id: int, ator: Optional[Ator] = None) -> EscalaResponse:
    """pendente → confirmada. Uma segunda confirmação é recusada."""
    return _transicionar(db, escala_id, "confirmar", ator)


def check_in(db: Session, escala_id: int, ator: Optional[Ator] = None) -> EscalaResponse:
    """confirmada → presente."""
    return _transicionar(db, escala_id, "check_in", ator)


def marcar_ausente(db: Session, escala_id: int, ator: Optional[Ator] = None) -> EscalaResponse:
    return _transicionar(db, escala_id, "ausente", ator)


def cancelar(
    db: Session, escala_id: int, motivo: Optional[str] = None, ator: Optional[Ator] = None
) -> EscalaResponse:
    """Cancela a escala ; o motivo é acrescentado às observações existentes."""
    return _transicionar(db, escala_id, "cancelar", ator, motivo=motivo)


def get_estatisticas(db: Session, culto_id: Optional[int] = None) -> EscalaEstatisticas:
    stmt = (
        select(Escala.status, func.count())
        .where(Escala.deleted_at.is_(None))
        .group_by(Escala.status)
    )
    if culto_id is not None:
        stmt = stmt.where(Escala.culto_id == culto_id)

    por_status = {s: 0 for s in STATUS_ESCALA}
    for status, total in db.execute(stmt).all():
        por_status[status] = total

    total = sum(por_status.values())
    validas = total - por_status["cancelada"]
    confirmadas = por_status["confirmada"] + por_status["presente"]
    taxa = round(confirmadas * 100 / validas, 1) if validas else 0.0

    return EscalaEstatisticas(total=total, por_status=por_status, taxa_confirmacao=taxa)


def _transicionar(
    db: Session,
    escala_id: int,
    acao: str,
    ator: Optional[Ator],
    motivo: Optional[str] = None,
) -> EscalaResponse:
    escala = _get(db, escala_id)
    if escala is None:
        raise ValueError("Escala não encontrada")

    anterior = escala.status
    escala.status = proximo_status(anterior, acao)

    agora = datetime.now()
    if acao == "confirmar":
        escala.confirmado_em = agora
    elif acao == "check_in":
        escala.check_in_em = agora
    elif acao == "cancelar" and motivo:
        nota = f"Cancelada: {motivo.strip()}"
        escala.observacoes = f"{escala.observacoes}\n{nota}" if escala.observacoes else nota

    db.commit()
    db.refresh(escala)

    audit_service.record(
        db, ator, "escalas", "UPDATE", escala.id, {"status": anterior}, {"status": escala.status}
    )
    logger.info("Escala %s : %s → %s", escala.id, anterior, escala.status)
    return _to_response(db, escala)


def _get(db: Session, escala_id: int) -> Optional[Escala]:
    escala = db.get(Escala, escala_id)
    if escala is None or escala.deleted_at is not None:
        return None
    return escala


def _verificar_pessoa(db: Session, pessoa_id: int) -> None:
    pessoa = db.get(Pessoa, pessoa_id)
    if pessoa is None or pessoa.deleted_at is not None:
        raise ValueError("Pessoa não encontrada")
    if not pessoa.ativo:
        raise ValueError("Pessoa inativa não pode ser escalada")


def _verificar_funcao(db: Session, funcao_id: int) -> None:
    funcao = db.get(Funcao, funcao_id)
    if funcao is None or funcao.deleted_at is not None or not funcao.ativo:
        raise ValueError("Função não encontrada")


def _commit(db: Session) -> None:
    """Commit traduzindo a violação do índice único parcial em erro amigável."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValueError(MSG_DUPLICADA) from e


def _to_response(db: Session, escala: Escala) -> EscalaResponse:
    pessoa = db.get(Pessoa, escala.pessoa_id)
    funcao = db.get(Funcao, escala.funcao_id)
    culto = db.get(Culto, escala.culto_id)

    return EscalaResponse(
        id=escala.id,
        pessoa_id=escala.pessoa_id,
        pessoa_nome=pessoa.nome_completo if pessoa is not None else None,
        funcao_id=escala.funcao_id,
        funcao_nome=funcao.nome if funcao is not None else None,
        culto_id=escala.culto_id,
        culto_titulo=culto.titulo if culto is not None else None,
        data_culto=culto.data_culto if culto is not None else None,
        status=escala.status,
        observacoes=escala.observacoes,
        confirmado_em=escala.confirmado_em,
        check_in_em=escala.check_in_em,
        created_at=escala.created_at,
        updated_at=escala.updated_at,
    )
