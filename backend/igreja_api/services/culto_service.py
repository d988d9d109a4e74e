"""
Serviço de cultos e detecção de conflitos de horário.

Dois cultos conflitam se acontecem na mesma data, no mesmo local, e seus
intervalos [início, fim) se sobrepõem. Sem horário de fim, o culto é pontual
(fim = início).
"""

import logging
from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from igreja_api.models.culto import STATUS_CULTO_ENCERRADOS, Culto
from igreja_api.models.escala import Escala
from igreja_api.models.referencia import TipoCulto
from igreja_api.schemas.common import PaginationInfo
from igreja_api.schemas.culto import (
    CultoCreate,
    CultoDetalhe,
    CultoResponse,
    CultoResumo,
    CultoUpdate,
)
from igreja_api.services import audit_service
from igreja_api.services.audit_service import Ator
from igreja_api.services.escala_service import list_escalas_do_culto
from igreja_api.services.pagination import paginate

logger = logging.getLogger(__name__)

CAMPOS_OBRIGATORIOS = {"titulo", "data_culto", "horario_inicio", "local", "tipo_culto_id"}


class ConflitoHorarioError(ValueError):
    """Outro culto ocupa o mesmo local num horário sobreposto (409)."""

    def __init__(self, conflito: Culto):
        super().__init__("Conflito de horário detectado")
        self.conflito = CultoResumo.model_validate(conflito)


def intervals_overlap(
    s1: time, e1: Optional[time], s2: time, e2: Optional[time]
) -> bool:
    """
    Sobreposição de intervalos semiabertos [s, e).

    Um intervalo sem fim (ou com fim == início) é um ponto p, que colide com
    [s, e) se s <= p < e, e com outro ponto apenas se forem iguais.
    A relação é simétrica.
    """
    e1 = s1 if e1 is None else e1
    e2 = s2 if e2 is None else e2

    if s1 == e1 and s2 == e2:
        return s1 == s2
    if s1 == e1:
        return s2 <= s1 < e2
    if s2 == e2:
        return s1 <= s2 < e1
    return s1 < e2 and s2 < e1


def find_conflict(
    db: Session,
    data_culto: date,
    inicio: time,
    fim: Optional[time],
    local: str,
    exclude_id: Optional[int] = None,
) -> Optional[Culto]:
    """Retorna o primeiro culto que conflita com o horário proposto, ou None."""
    stmt = select(Culto).where(
        Culto.data_culto == data_culto,
        func.lower(Culto.local) == local.strip().lower(),
        Culto.deleted_at.is_(None),
        Culto.status != "cancelado",
    )
    if exclude_id is not None:
        stmt = stmt.where(Culto.id != exclude_id)

    candidatos = db.execute(stmt.order_by(Culto.horario_inicio)).scalars().all()
    for existente in candidatos:
        if intervals_overlap(inicio, fim, existente.horario_inicio, existente.horario_fim):
            return existente
    return None


def has_conflict(
    db: Session,
    data_culto: date,
    inicio: time,
    fim: Optional[time],
    local: str,
    exclude_id: Optional[int] = None,
) -> bool:
    return find_conflict(db, data_culto, inicio, fim, local, exclude_id) is not None


def list_cultos(
    db: Session,
    page: int,
    limit: int,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    tipo_culto_id: Optional[int] = None,
    status: Optional[str] = None,
    busca: Optional[str] = None,
) -> tuple[list[CultoResponse], PaginationInfo]:
    stmt = select(Culto).where(Culto.deleted_at.is_(None))
    if data_inicio is not None:
        stmt = stmt.where(Culto.data_culto >= data_inicio)
    if data_fim is not None:
        stmt = stmt.where(Culto.data_culto <= data_fim)
    if tipo_culto_id is not None:
        stmt = stmt.where(Culto.tipo_culto_id == tipo_culto_id)
    if status:
        stmt = stmt.where(Culto.status == status)
    if busca:
        stmt = stmt.where(or_(Culto.titulo.ilike(f"%{busca}%"), Culto.local.ilike(f"%{busca}%")))

    cultos, pagination = paginate(
        db, stmt.order_by(Culto.data_culto.desc(), Culto.horario_inicio), page, limit
    )
    return [_to_response(db, c) for c in cultos], pagination


def get_culto(db: Session, culto_id: int) -> Optional[CultoDetalhe]:
    """Detalhe de um culto com suas escalas não excluídas."""
    culto = _get(db, culto_id)
    if culto is None:
        return None

    return CultoDetalhe(
        **_to_response(db, culto).model_dump(),
        escalas=list_escalas_do_culto(db, culto.id),
    )


def create_culto(
    db: Session, data: CultoCreate, ator: Optional[Ator] = None
) -> CultoResponse:
    """
    Cria um culto com status "planejado".

    Validações :
    1. O tipo de culto existe e está ativo
    2. Nenhum outro culto ocupa o local num horário sobreposto
    """
    _verificar_tipo(db, data.tipo_culto_id)

    conflito = find_conflict(db, data.data_culto, data.horario_inicio, data.horario_fim, data.local)
    if conflito is not None:
        logger.info("Conflito de horário : culto proposto em %s colide com %s", data.local, conflito.id)
        raise ConflitoHorarioError(conflito)

    culto = Culto(
        **data.model_dump(),
        status="planejado",
        created_by=ator.usuario_id if ator else None,
    )
    db.add(culto)
    _commit(db)
    db.refresh(culto)

    audit_service.record(db, ator, "cultos", "CREATE", culto.id, dados_novos=audit_service.snapshot(culto))
    logger.info("Culto criado : %s (%s) em %s", culto.titulo, culto.id, culto.data_culto)
    return _to_response(db, culto)


def update_culto(
    db: Session, culto_id: int, data: CultoUpdate, ator: Optional[Ator] = None
) -> Optional[CultoResponse]:
    """
    Atualiza um culto que ainda não aconteceu e não foi encerrado.
    O conflito é verificado contra todos os OUTROS cultos.
    """
    culto = _get(db, culto_id)
    if culto is None:
        return None

    verificar_alteravel(culto, "editar")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("tipo_culto_id") is not None:
        _verificar_tipo(db, changes["tipo_culto_id"])

    data_culto = _valor(changes, culto, "data_culto")
    inicio = _valor(changes, culto, "horario_inicio")
    fim = changes["horario_fim"] if "horario_fim" in changes else culto.horario_fim
    local = _valor(changes, culto, "local")

    if fim is not None and fim < inicio:
        raise ValueError("O horário de fim deve ser posterior ao horário de início.")

    conflito = find_conflict(db, data_culto, inicio, fim, local, exclude_id=culto.id)
    if conflito is not None:
        raise ConflitoHorarioError(conflito)

    antes = audit_service.snapshot(culto)
    for field, value in changes.items():
        if value is None and field in CAMPOS_OBRIGATORIOS:
            continue
        setattr(culto, field, value)

    _commit(db)
    db.refresh(culto)

    audit_service.record(db, ator, "cultos", "UPDATE", culto.id, antes, audit_service.snapshot(culto))
    return _to_response(db, culto)


def delete_culto(db: Session, culto_id: int, ator: Optional[Ator] = None) -> bool:
    """Exclusão lógica. Retorna False se o culto não existe."""
    culto = _get(db, culto_id)
    if culto is None:
        return False

    verificar_alteravel(culto, "excluir")

    antes = audit_service.snapshot(culto)
    culto.deleted_at = datetime.now()
    db.commit()

    audit_service.record(db, ator, "cultos", "DELETE", culto.id, dados_anteriores=antes)
    logger.info("Culto excluído : %s", culto.id)
    return True


def update_status(
    db: Session, culto_id: int, status: str, ator: Optional[Ator] = None
) -> Optional[CultoResponse]:
    culto = _get(db, culto_id)
    if culto is None:
        return None

    anterior = culto.status
    if anterior == "finalizado" and status != anterior:
        raise ValueError("Não é possível alterar o status de cultos finalizados")
    if anterior == "cancelado" and status != anterior:
        # Reativação : o horário pode ter sido ocupado enquanto o culto estava cancelado
        conflito = find_conflict(
            db, culto.data_culto, culto.horario_inicio, culto.horario_fim, culto.local, exclude_id=culto.id
        )
        if conflito is not None:
            raise ConflitoHorarioError(conflito)

    culto.status = status
    _commit(db)
    db.refresh(culto)

    audit_service.record(db, ator, "cultos", "UPDATE", culto.id, {"status": anterior}, {"status": status})
    logger.info("Culto %s : status %s → %s", culto.id, anterior, status)
    return _to_response(db, culto)


def verificar_alteravel(culto: Culto, acao: str, agora: Optional[datetime] = None) -> None:
    """
    Um culto encerrado (finalizado/cancelado) ou cujo início já passou
    não pode mais ser editado nem excluído.
    """
    if culto.status in STATUS_CULTO_ENCERRADOS:
        raise ValueError(f"Não é possível {acao} cultos finalizados ou cancelados")

    agora = agora or datetime.now()
    if datetime.combine(culto.data_culto, culto.horario_inicio) < agora:
        raise ValueError(f"Não é possível {acao} cultos que já aconteceram")


def _get(db: Session, culto_id: int) -> Optional[Culto]:
    culto = db.get(Culto, culto_id)
    if culto is None or culto.deleted_at is not None:
        return None
    return culto


def _valor(changes: dict, culto: Culto, campo: str):
    """Valor proposto para o campo, ou o atual se não foi enviado (ou veio nulo)."""
    valor = changes.get(campo)
    return getattr(culto, campo) if valor is None else valor


def _verificar_tipo(db: Session, tipo_culto_id: int) -> None:
    tipo = db.get(TipoCulto, tipo_culto_id)
    if tipo is None or not tipo.ativo:
        raise ValueError("Tipo de culto não encontrado")


def _commit(db: Session) -> None:
    """Commit traduzindo a violação do índice único de horário em erro amigável."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValueError("Já existe um culto neste local, data e horário de início.") from e


def _to_response(db: Session, culto: Culto) -> CultoResponse:
    tipo = db.get(TipoCulto, culto.tipo_culto_id)
    total_escalas = db.execute(
        select(func.count())
        .select_from(Escala)
        .where(
            Escala.culto_id == culto.id,
            Escala.deleted_at.is_(None),
            Escala.status != "cancelada",
        )
    ).scalar() or 0

    return CultoResponse(
        id=culto.id,
        titulo=culto.titulo,
        descricao=culto.descricao,
        data_culto=culto.data_culto,
        horario_inicio=culto.horario_inicio,
        horario_fim=culto.horario_fim,
        local=culto.local,
        tipo_culto_id=culto.tipo_culto_id,
        tipo_culto_nome=tipo.nome if tipo is not None else None,
        status=culto.status,
        observacoes=culto.observacoes,
        total_escalas=total_escalas,
        created_at=culto.created_at,
        updated_at=culto.updated_at,
    )
