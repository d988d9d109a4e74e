"""
Serviço das atividades da programação de um culto.
As listas de pessoas e departamentos são substituídas por inteiro (DELETE + INSERT).
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from igreja_api.models.atividade import Atividade, AtividadeDepartamento, AtividadePessoa
from igreja_api.models.culto import Culto
from igreja_api.models.pessoa import Pessoa
from igreja_api.models.referencia import Departamento, TipoAtividade
from igreja_api.schemas.atividade import (
    AtividadeCreate,
    AtividadeDepartamentoIn,
    AtividadeDepartamentoResponse,
    AtividadePessoaIn,
    AtividadePessoaResponse,
    AtividadeResponse,
    AtividadeUpdate,
)
from igreja_api.schemas.common import PaginationInfo
from igreja_api.schemas.referencia import TipoAtividadeResponse
from igreja_api.services import audit_service
from igreja_api.services.audit_service import Ator
from igreja_api.services.pagination import paginate

logger = logging.getLogger(__name__)


def list_atividades(
    db: Session,
    page: int,
    limit: int,
    busca: Optional[str] = None,
    culto_id: Optional[int] = None,
    tipo_atividade_id: Optional[int] = None,
) -> tuple[list[AtividadeResponse], PaginationInfo]:
    stmt = select(Atividade).where(Atividade.deleted_at.is_(None))
    if busca:
        stmt = stmt.where(or_(
            Atividade.titulo.ilike(f"%{busca}%"),
            Atividade.descricao.ilike(f"%{busca}%"),
        ))
    if culto_id is not None:
        stmt = stmt.where(Atividade.culto_id == culto_id)
    if tipo_atividade_id is not None:
        stmt = stmt.where(Atividade.tipo_atividade_id == tipo_atividade_id)

    atividades, pagination = paginate(
        db, stmt.order_by(Atividade.culto_id, Atividade.ordem_programacao), page, limit
    )
    return [_to_response(db, a) for a in atividades], pagination


def list_por_culto(db: Session, culto_id: int) -> list[AtividadeResponse]:
    """Programação de um culto, na ordem de apresentação."""
    _verificar_culto(db, culto_id)
    atividades = db.execute(
        select(Atividade)
        .where(Atividade.culto_id == culto_id, Atividade.deleted_at.is_(None))
        .order_by(Atividade.ordem_programacao, Atividade.horario_inicio)
    ).scalars().all()
    return [_to_response(db, a) for a in atividades]


def list_tipos(db: Session) -> list[TipoAtividadeResponse]:
    tipos = db.execute(
        select(TipoAtividade).where(TipoAtividade.ativo.is_(True)).order_by(TipoAtividade.nome)
    ).scalars().all()
    return [TipoAtividadeResponse.model_validate(t) for t in tipos]


def get_atividade(db: Session, atividade_id: int) -> Optional[AtividadeResponse]:
    atividade = _get(db, atividade_id)
    if atividade is None:
        return None
    return _to_response(db, atividade)


def create_atividade(
    db: Session, data: AtividadeCreate, ator: Optional[Ator] = None
) -> AtividadeResponse:
    _verificar_culto(db, data.culto_id)
    if data.tipo_atividade_id is not None:
        _verificar_tipo(db, data.tipo_atividade_id)

    atividade = Atividade(
        **data.model_dump(exclude={"pessoas", "departamentos"}),
        created_by=ator.usuario_id if ator else None,
    )
    try:
        db.add(atividade)
        db.flush()  # Obter o id antes de inserir as associações
        _replace_pessoas(db, atividade.id, data.pessoas)
        _replace_departamentos(db, atividade.id, data.departamentos)
    except ValueError:
        db.rollback()
        raise
    db.commit()
    db.refresh(atividade)

    audit_service.record(
        db, ator, "atividades", "CREATE", atividade.id, dados_novos=audit_service.snapshot(atividade)
    )
    logger.info("Atividade criada : %s (culto %s)", atividade.titulo, atividade.culto_id)
    return _to_response(db, atividade)


def update_atividade(
    db: Session, atividade_id: int, data: AtividadeUpdate, ator: Optional[Ator] = None
) -> Optional[AtividadeResponse]:
    atividade = _get(db, atividade_id)
    if atividade is None:
        return None

    changes = data.model_dump(exclude_unset=True, exclude={"pessoas", "departamentos"})
    if changes.get("tipo_atividade_id") is not None:
        _verificar_tipo(db, changes["tipo_atividade_id"])

    antes = audit_service.snapshot(atividade)
    for field, value in changes.items():
        if value is None and field in {"titulo", "ordem_programacao"}:
            continue
        setattr(atividade, field, value)

    try:
        if data.pessoas is not None:
            _replace_pessoas(db, atividade.id, data.pessoas)
        if data.departamentos is not None:
            _replace_departamentos(db, atividade.id, data.departamentos)
    except ValueError:
        db.rollback()
        raise

    db.commit()
    db.refresh(atividade)

    audit_service.record(
        db, ator, "atividades", "UPDATE", atividade.id, antes, audit_service.snapshot(atividade)
    )
    return _to_response(db, atividade)


def delete_atividade(db: Session, atividade_id: int, ator: Optional[Ator] = None) -> bool:
    atividade = _get(db, atividade_id)
    if atividade is None:
        return False

    antes = audit_service.snapshot(atividade)
    atividade.deleted_at = datetime.now()
    db.commit()

    audit_service.record(db, ator, "atividades", "DELETE", atividade.id, dados_anteriores=antes)
    return True


def _get(db: Session, atividade_id: int) -> Optional[Atividade]:
    atividade = db.get(Atividade, atividade_id)
    if atividade is None or atividade.deleted_at is not None:
        return None
    return atividade


def _verificar_culto(db: Session, culto_id: int) -> None:
    culto = db.get(Culto, culto_id)
    if culto is None or culto.deleted_at is not None:
        raise ValueError("Culto não encontrado")


def _verificar_tipo(db: Session, tipo_atividade_id: int) -> None:
    if db.get(TipoAtividade, tipo_atividade_id) is None:
        raise ValueError("Tipo de atividade não encontrado")


def _replace_pessoas(db: Session, atividade_id: int, pessoas: list[AtividadePessoaIn]) -> None:
    ids = [p.pessoa_id for p in pessoas]
    if len(ids) != len(set(ids)):
        raise ValueError("Uma pessoa não pode aparecer duas vezes na mesma atividade.")
    if ids:
        existentes = set(db.execute(
            select(Pessoa.id).where(Pessoa.id.in_(ids), Pessoa.deleted_at.is_(None))
        ).scalars().all())
        if set(ids) - existentes:
            raise ValueError(f"Pessoas inexistentes : {sorted(set(ids) - existentes)}")

    db.execute(delete(AtividadePessoa).where(AtividadePessoa.atividade_id == atividade_id))
    if pessoas:
        db.bulk_insert_mappings(AtividadePessoa, [
            {"atividade_id": atividade_id, **p.model_dump()}
            for p in pessoas
        ])


def _replace_departamentos(
    db: Session, atividade_id: int, departamentos: list[AtividadeDepartamentoIn]
) -> None:
    ids = [d.departamento_id for d in departamentos]
    if len(ids) != len(set(ids)):
        raise ValueError("Um departamento não pode aparecer duas vezes na mesma atividade.")
    if ids:
        existentes = set(db.execute(
            select(Departamento.id).where(Departamento.id.in_(ids), Departamento.deleted_at.is_(None))
        ).scalars().all())
        if set(ids) - existentes:
            raise ValueError(f"Departamentos inexistentes : {sorted(set(ids) - existentes)}")

    db.execute(delete(AtividadeDepartamento).where(AtividadeDepartamento.atividade_id == atividade_id))
    if departamentos:
        db.bulk_insert_mappings(AtividadeDepartamento, [
            {"atividade_id": atividade_id, **d.model_dump()}
            for d in departamentos
        ])


def _to_response(db: Session, atividade: Atividade) -> AtividadeResponse:
    pessoas = db.execute(
        select(AtividadePessoa, Pessoa.nome_completo)
        .join(Pessoa, Pessoa.id == AtividadePessoa.pessoa_id)
        .where(AtividadePessoa.atividade_id == atividade.id)
        .order_by(Pessoa.nome_completo)
    ).all()
    departamentos = db.execute(
        select(AtividadeDepartamento, Departamento.nome)
        .join(Departamento, Departamento.id == AtividadeDepartamento.departamento_id)
        .where(AtividadeDepartamento.atividade_id == atividade.id)
        .order_by(Departamento.nome)
    ).all()

    return AtividadeResponse(
        id=atividade.id,
        culto_id=atividade.culto_id,
        titulo=atividade.titulo,
        descricao=atividade.descricao,
        tipo_atividade_id=atividade.tipo_atividade_id,
        ordem_programacao=atividade.ordem_programacao,
        horario_inicio=atividade.horario_inicio,
        duracao_estimada=atividade.duracao_estimada,
        observacoes=atividade.observacoes,
        pessoas=[
            AtividadePessoaResponse(
                pessoa_id=ap.pessoa_id, nome_completo=nome, papel=ap.papel, confirmado=ap.confirmado
            )
            for ap, nome in pessoas
        ],
        departamentos=[
            AtividadeDepartamentoResponse(
                departamento_id=ad.departamento_id, nome=nome, papel=ad.papel, confirmado=ad.confirmado
            )
            for ad, nome in departamentos
        ],
        created_at=atividade.created_at,
        updated_at=atividade.updated_at,
    )
