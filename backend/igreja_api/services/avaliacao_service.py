"""
Serviço de avaliações de culto.

A avaliação pública e suas notas por critério são gravadas numa única
transação : ou todas as linhas são persistidas, ou nenhuma.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from igreja_api.models.avaliacao import Avaliacao, AvaliacaoCriterio, CriterioAvaliacao
from igreja_api.models.culto import Culto
from igreja_api.schemas.avaliacao import (
    AvaliacaoEstatisticas,
    AvaliacaoPublicaCreate,
    AvaliacaoResponse,
    CriterioResponse,
    MediaCriterio,
    NotaCriterioResponse,
)
from igreja_api.schemas.common import PaginationInfo
from igreja_api.services import audit_service
from igreja_api.services.audit_service import Ator
from igreja_api.services.pagination import paginate

logger = logging.getLogger(__name__)


def list_criterios(db: Session) -> list[CriterioResponse]:
    """Critérios ativos na ordem de exibição do formulário."""
    criterios = db.execute(
        select(CriterioAvaliacao)
        .where(CriterioAvaliacao.ativo.is_(True))
        .order_by(CriterioAvaliacao.ordem_exibicao, CriterioAvaliacao.nome)
    ).scalars().all()
    return [CriterioResponse.model_validate(c) for c in criterios]


def create_avaliacao_publica(
    db: Session, data: AvaliacaoPublicaCreate, ator: Optional[Ator] = None
) -> AvaliacaoResponse:
    """
    Registra uma avaliação anônima (ou identificada) com suas notas.

    Validações :
    1. O culto (se informado) existe
    2. Todos os critérios existem e estão ativos
    Qualquer falha desfaz a transação inteira.
    """
    try:
        if data.culto_id is not None:
            culto = db.get(Culto, data.culto_id)
            if culto is None or culto.deleted_at is not None:
                raise ValueError("Culto não encontrado")

        ids = {c.criterio_id for c in data.criterios}
        validos = set(db.execute(
            select(CriterioAvaliacao.id)
            .where(CriterioAvaliacao.id.in_(ids), CriterioAvaliacao.ativo.is_(True))
        ).scalars().all())
        invalidos = ids - validos
        if invalidos:
            raise ValueError(f"Critérios inválidos ou inativos : {sorted(invalidos)}")

        avaliacao = Avaliacao(
            culto_id=data.culto_id,
            avaliador_id=ator.usuario_id if ator else None,
            nome_avaliador=data.nome_avaliador,
            email_avaliador=data.email_avaliador,
            data_visita=data.data_visita,
            comentario_geral=data.comentario_geral,
            recomendaria=data.recomendaria,
            ip_address=ator.ip if ator else None,
        )
        db.add(avaliacao)
        db.flush()  # Obter o id antes de inserir as notas

        db.add_all([
            AvaliacaoCriterio(
                avaliacao_id=avaliacao.id,
                criterio_id=c.criterio_id,
                nota=c.nota,
                comentario=c.comentario,
            )
            for c in data.criterios
        ])
        db.commit()
    except (ValueError, SQLAlchemyError):
        db.rollback()
        raise

    db.refresh(avaliacao)
    audit_service.record(
        db, ator, "avaliacoes", "CREATE", avaliacao.id, dados_novos=audit_service.snapshot(avaliacao)
    )
    logger.info("Avaliação registrada : %s (%d critérios)", avaliacao.id, len(data.criterios))
    return _to_response(db, avaliacao)


def list_avaliacoes(
    db: Session,
    page: int,
    limit: int,
    culto_id: Optional[int] = None,
    recomendaria: Optional[bool] = None,
) -> tuple[list[AvaliacaoResponse], PaginationInfo]:
    stmt = select(Avaliacao).where(Avaliacao.deleted_at.is_(None))
    if culto_id is not None:
        stmt = stmt.where(Avaliacao.culto_id == culto_id)
    if recomendaria is not None:
        stmt = stmt.where(Avaliacao.recomendaria.is_(recomendaria))

    avaliacoes, pagination = paginate(db, stmt.order_by(Avaliacao.created_at.desc()), page, limit)
    return [_to_response(db, a) for a in avaliacoes], pagination


def get_avaliacao(db: Session, avaliacao_id: int) -> Optional[AvaliacaoResponse]:
    avaliacao = _get(db, avaliacao_id)
    if avaliacao is None:
        return None
    return _to_response(db, avaliacao)


def delete_avaliacao(db: Session, avaliacao_id: int, ator: Optional[Ator] = None) -> bool:
    avaliacao = _get(db, avaliacao_id)
    if avaliacao is None:
        return False

    antes = audit_service.snapshot(avaliacao)
    avaliacao.deleted_at = datetime.now()
    db.commit()

    audit_service.record(db, ator, "avaliacoes", "DELETE", avaliacao.id, dados_anteriores=antes)
    return True


def get_estatisticas(db: Session, culto_id: Optional[int] = None) -> AvaliacaoEstatisticas:
    filtros = [Avaliacao.deleted_at.is_(None)]
    if culto_id is not None:
        filtros.append(Avaliacao.culto_id == culto_id)

    total = db.execute(select(func.count()).select_from(Avaliacao).where(*filtros)).scalar() or 0
    recomendariam = db.execute(
        select(func.count()).select_from(Avaliacao).where(*filtros, Avaliacao.recomendaria.is_(True))
    ).scalar() or 0

    medias = db.execute(
        select(
            CriterioAvaliacao.id,
            CriterioAvaliacao.nome,
            func.avg(AvaliacaoCriterio.nota),
            func.count(AvaliacaoCriterio.id),
        )
        .join(AvaliacaoCriterio, AvaliacaoCriterio.criterio_id == CriterioAvaliacao.id)
        .join(Avaliacao, Avaliacao.id == AvaliacaoCriterio.avaliacao_id)
        .where(*filtros)
        .group_by(CriterioAvaliacao.id, CriterioAvaliacao.nome, CriterioAvaliacao.ordem_exibicao)
        .order_by(CriterioAvaliacao.ordem_exibicao)
    ).all()

    return AvaliacaoEstatisticas(
        total=total,
        recomendariam=recomendariam,
        percentual_recomendacao=round(recomendariam * 100 / total) if total else 0,
        medias_por_criterio=[
            MediaCriterio(criterio_id=cid, nome=nome, media=round(float(media), 2), total_respostas=n)
            for cid, nome, media, n in medias
        ],
    )


def _get(db: Session, avaliacao_id: int) -> Optional[Avaliacao]:
    avaliacao = db.get(Avaliacao, avaliacao_id)
    if avaliacao is None or avaliacao.deleted_at is not None:
        return None
    return avaliacao


def _to_response(db: Session, avaliacao: Avaliacao) -> AvaliacaoResponse:
    notas = db.execute(
        select(AvaliacaoCriterio, CriterioAvaliacao.nome)
        .join(CriterioAvaliacao, CriterioAvaliacao.id == AvaliacaoCriterio.criterio_id)
        .where(AvaliacaoCriterio.avaliacao_id == avaliacao.id)
        .order_by(CriterioAvaliacao.ordem_exibicao)
    ).all()

    criterios = [
        NotaCriterioResponse(
            criterio_id=nota.criterio_id, criterio_nome=nome, nota=nota.nota, comentario=nota.comentario
        )
        for nota, nome in notas
    ]
    media = round(sum(c.nota for c in criterios) / len(criterios), 2) if criterios else None

    return AvaliacaoResponse(
        id=avaliacao.id,
        culto_id=avaliacao.culto_id,
        avaliador_id=avaliacao.avaliador_id,
        nome_avaliador=avaliacao.nome_avaliador,
        email_avaliador=avaliacao.email_avaliador,
        data_visita=avaliacao.data_visita,
        comentario_geral=avaliacao.comentario_geral,
        recomendaria=avaliacao.recomendaria,
        criterios=criterios,
        media=media,
        created_at=avaliacao.created_at,
    )
