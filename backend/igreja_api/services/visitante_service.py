"""
Serviço de visitantes.
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from igreja_api.models.culto import Culto
from igreja_api.models.referencia import FormaConhecimento
from igreja_api.models.visitante import Visitante
from igreja_api.schemas.common import PaginationInfo
from igreja_api.schemas.visitante import (
    VisitanteCreate,
    VisitanteEstatisticas,
    VisitanteResponse,
    VisitanteUpdate,
)
from igreja_api.services import audit_service
from igreja_api.services.audit_service import Ator
from igreja_api.services.pagination import paginate

logger = logging.getLogger(__name__)


def list_visitantes(
    db: Session,
    page: int,
    limit: int,
    busca: Optional[str] = None,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    culto_id: Optional[int] = None,
    eh_cristao: Optional[bool] = None,
) -> tuple[list[VisitanteResponse], PaginationInfo]:
    stmt = select(Visitante).where(Visitante.deleted_at.is_(None))
    if busca:
        stmt = stmt.where(or_(
            Visitante.nome_completo.ilike(f"%{busca}%"),
            Visitante.whatsapp.ilike(f"%{busca}%"),
        ))
    if data_inicio is not None:
        stmt = stmt.where(Visitante.data_visita >= data_inicio)
    if data_fim is not None:
        stmt = stmt.where(Visitante.data_visita <= data_fim)
    if culto_id is not None:
        stmt = stmt.where(Visitante.culto_id == culto_id)
    if eh_cristao is not None:
        stmt = stmt.where(Visitante.eh_cristao.is_(eh_cristao))

    visitantes, pagination = paginate(
        db, stmt.order_by(Visitante.data_visita.desc(), Visitante.created_at.desc()), page, limit
    )
    return [VisitanteResponse.model_validate(v) for v in visitantes], pagination


def get_visitante(db: Session, visitante_id: int) -> Optional[VisitanteResponse]:
    visitante = _get(db, visitante_id)
    if visitante is None:
        return None
    return VisitanteResponse.model_validate(visitante)


def create_visitante(
    db: Session, data: VisitanteCreate, ator: Optional[Ator] = None
) -> VisitanteResponse:
    _verificar_referencias(db, data.culto_id, data.forma_conhecimento_id)

    visitante = Visitante(
        **data.model_dump(),
        cadastrado_por=ator.usuario_id if ator else None,
    )
    db.add(visitante)
    db.commit()
    db.refresh(visitante)

    audit_service.record(
        db, ator, "visitantes", "CREATE", visitante.id, dados_novos=audit_service.snapshot(visitante)
    )
    logger.info("Visitante cadastrado : %s (%s)", visitante.nome_completo, visitante.id)
    return VisitanteResponse.model_validate(visitante)


def update_visitante(
    db: Session, visitante_id: int, data: VisitanteUpdate, ator: Optional[Ator] = None
) -> Optional[VisitanteResponse]:
    visitante = _get(db, visitante_id)
    if visitante is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    _verificar_referencias(db, changes.get("culto_id"), changes.get("forma_conhecimento_id"))

    antes = audit_service.snapshot(visitante)
    for field, value in changes.items():
        if value is None and field in {"nome_completo", "data_visita", "eh_cristao", "mora_perto"}:
            continue
        setattr(visitante, field, value)

    db.commit()
    db.refresh(visitante)

    audit_service.record(
        db, ator, "visitantes", "UPDATE", visitante.id, antes, audit_service.snapshot(visitante)
    )
    return VisitanteResponse.model_validate(visitante)


def delete_visitante(db: Session, visitante_id: int, ator: Optional[Ator] = None) -> bool:
    visitante = _get(db, visitante_id)
    if visitante is None:
        return False

    antes = audit_service.snapshot(visitante)
    visitante.deleted_at = datetime.now()
    db.commit()

    audit_service.record(db, ator, "visitantes", "DELETE", visitante.id, dados_anteriores=antes)
    return True


def get_estatisticas(db: Session, hoje: Optional[date] = None) -> VisitanteEstatisticas:
    hoje = hoje or date.today()
    base = select(func.count()).select_from(Visitante).where(Visitante.deleted_at.is_(None))

    total = db.execute(base).scalar() or 0
    do_dia = db.execute(base.where(Visitante.data_visita == hoje)).scalar() or 0
    do_mes = db.execute(base.where(Visitante.data_visita >= hoje.replace(day=1))).scalar() or 0
    do_ano = db.execute(base.where(Visitante.data_visita >= hoje.replace(month=1, day=1))).scalar() or 0
    cristaos = db.execute(base.where(Visitante.eh_cristao.is_(True))).scalar() or 0

    return VisitanteEstatisticas(
        total=total,
        hoje=do_dia,
        mes=do_mes,
        ano=do_ano,
        cristaos=cristaos,
        nao_cristaos=total - cristaos,
        percentual_cristaos=round(cristaos * 100 / total) if total else 0,
    )


def _get(db: Session, visitante_id: int) -> Optional[Visitante]:
    visitante = db.get(Visitante, visitante_id)
    if visitante is None or visitante.deleted_at is not None:
        return None
    return visitante


def _verificar_referencias(
    db: Session, culto_id: Optional[int], forma_conhecimento_id: Optional[int]
) -> None:
    if culto_id is not None:
        culto = db.get(Culto, culto_id)
        if culto is None or culto.deleted_at is not None:
            raise ValueError("Culto não encontrado")
    if forma_conhecimento_id is not None and db.get(FormaConhecimento, forma_conhecimento_id) is None:
        raise ValueError("Forma de conhecimento não encontrada")
