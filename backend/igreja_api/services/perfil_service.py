"""
Serviço de perfis de acesso e de suas permissões.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from igreja_api.models.usuario import Perfil, PerfilPermissao, Permissao, Usuario
from igreja_api.schemas.common import PaginationInfo
from igreja_api.schemas.perfil import (
    PerfilCreate,
    PerfilEstatisticas,
    PerfilResponse,
    PerfilUpdate,
    PerfilUsoItem,
    PermissaoResponse,
)
from igreja_api.services import audit_service
from igreja_api.services.audit_service import Ator
from igreja_api.services.pagination import paginate

logger = logging.getLogger(__name__)

CAMPOS_OBRIGATORIOS = {"nome", "nivel_acesso", "ativo"}


def list_perfis(
    db: Session,
    page: int,
    limit: int,
    busca: Optional[str] = None,
    ativo: Optional[bool] = None,
) -> tuple[list[PerfilResponse], PaginationInfo]:
    stmt = select(Perfil).where(Perfil.deleted_at.is_(None))
    if busca:
        stmt = stmt.where(or_(Perfil.nome.ilike(f"%{busca}%"), Perfil.descricao.ilike(f"%{busca}%")))
    if ativo is not None:
        stmt = stmt.where(Perfil.ativo.is_(ativo))

    perfis, pagination = paginate(db, stmt.order_by(Perfil.nivel_acesso.desc(), Perfil.nome), page, limit)
    return [_to_response(db, p) for p in perfis], pagination


def list_todos(db: Session) -> list[PerfilResponse]:
    """Perfis ativos, sem paginação (usado em campos de seleção)."""
    perfis = db.execute(
        select(Perfil)
        .where(Perfil.deleted_at.is_(None), Perfil.ativo.is_(True))
        .order_by(Perfil.nome)
    ).scalars().all()
    return [_to_response(db, p, com_permissoes=False) for p in perfis]


def get_perfil(db: Session, perfil_id: int) -> Optional[PerfilResponse]:
    perfil = _get(db, perfil_id)
    if perfil is None:
        return None
    return _to_response(db, perfil)


def create_perfil(db: Session, data: PerfilCreate, ator: Optional[Ator] = None) -> PerfilResponse:
    _verificar_nome_unico(db, data.nome)

    perfil = Perfil(
        nome=data.nome,
        descricao=data.descricao,
        nivel_acesso=data.nivel_acesso,
        ativo=data.ativo,
    )
    db.add(perfil)
    db.flush()  # Obter o id antes de inserir as permissões

    if data.permissoes:
        _replace_permissoes(db, perfil.id, data.permissoes)

    _commit(db)
    db.refresh(perfil)

    audit_service.record(db, ator, "perfis", "CREATE", perfil.id, dados_novos=audit_service.snapshot(perfil))
    logger.info("Perfil criado : %s (%s)", perfil.nome, perfil.id)
    return _to_response(db, perfil)


def update_perfil(
    db: Session, perfil_id: int, data: PerfilUpdate, ator: Optional[Ator] = None
) -> Optional[PerfilResponse]:
    perfil = _get(db, perfil_id)
    if perfil is None:
        return None

    antes = audit_service.snapshot(perfil)
    if data.nome is not None and data.nome != perfil.nome:
        _verificar_nome_unico(db, data.nome, exclude_id=perfil.id)

    for field, value in data.model_dump(exclude_unset=True, exclude={"permissoes"}).items():
        if value is None and field in CAMPOS_OBRIGATORIOS:
            continue
        setattr(perfil, field, value)

    if data.permissoes is not None:
        _replace_permissoes(db, perfil.id, data.permissoes)

    _commit(db)
    db.refresh(perfil)

    audit_service.record(db, ator, "perfis", "UPDATE", perfil.id, antes, audit_service.snapshot(perfil))
    return _to_response(db, perfil)


def set_profile_permissions(
    db: Session, perfil_id: int, permissao_ids: Iterable[int], ator: Optional[Ator] = None
) -> PerfilResponse:
    """
    Substitui as permissões do perfil numa única transação :
    remove todas as associações e insere as novas.
    Se algum id não existir, nada é alterado.
    """
    perfil = _get(db, perfil_id)
    if perfil is None:
        raise ValueError("Perfil não encontrado")

    antes = sorted(_permissao_ids(db, perfil.id))
    _replace_permissoes(db, perfil.id, permissao_ids)
    _commit(db)

    audit_service.record(
        db, ator, "perfil_permissoes", "UPDATE", perfil.id,
        {"permissoes": antes}, {"permissoes": sorted(set(permissao_ids))},
    )
    logger.info("Permissões do perfil %s substituídas (%d)", perfil.id, len(set(permissao_ids)))
    return _to_response(db, perfil)


def toggle_ativo(db: Session, perfil_id: int, ator: Optional[Ator] = None) -> Optional[PerfilResponse]:
    perfil = _get(db, perfil_id)
    if perfil is None:
        return None

    perfil.ativo = not perfil.ativo
    db.commit()
    db.refresh(perfil)

    audit_service.record(db, ator, "perfis", "UPDATE", perfil.id, {"ativo": not perfil.ativo}, {"ativo": perfil.ativo})
    return _to_response(db, perfil)


def delete_perfil(db: Session, perfil_id: int, ator: Optional[Ator] = None) -> bool:
    """
    Exclusão lógica de um perfil.
    Recusada enquanto houver usuários (não excluídos) usando o perfil.
    Retorna False se o perfil não existe.
    """
    perfil = _get(db, perfil_id)
    if perfil is None:
        return False

    em_uso = _contar_usuarios(db, perfil.id)
    if em_uso > 0:
        raise ValueError(
            f"Não é possível excluir o perfil. Há {em_uso} usuário(s) usando este perfil."
        )

    antes = audit_service.snapshot(perfil)
    perfil.deleted_at = datetime.now()
    db.commit()

    audit_service.record(db, ator, "perfis", "DELETE", perfil.id, dados_anteriores=antes)
    logger.info("Perfil excluído : %s", perfil.id)
    return True


def list_permissoes_agrupadas(db: Session) -> dict[str, list[PermissaoResponse]]:
    """Permissões ativas agrupadas por módulo."""
    permissoes = db.execute(
        select(Permissao)
        .where(Permissao.ativo.is_(True))
        .order_by(Permissao.modulo, Permissao.nome)
    ).scalars().all()

    agrupadas: dict[str, list[PermissaoResponse]] = defaultdict(list)
    for p in permissoes:
        agrupadas[p.modulo].append(PermissaoResponse.model_validate(p))
    return dict(agrupadas)


def get_estatisticas(db: Session) -> PerfilEstatisticas:
    total = db.execute(
        select(func.count()).select_from(Perfil).where(Perfil.deleted_at.is_(None))
    ).scalar() or 0
    ativos = db.execute(
        select(func.count()).select_from(Perfil).where(Perfil.deleted_at.is_(None), Perfil.ativo.is_(True))
    ).scalar() or 0

    rows = db.execute(
        select(Perfil.id, Perfil.nome, func.count(Usuario.id))
        .outerjoin(Usuario, (Usuario.perfil_id == Perfil.id) & Usuario.deleted_at.is_(None))
        .where(Perfil.deleted_at.is_(None))
        .group_by(Perfil.id, Perfil.nome)
        .order_by(Perfil.nome)
    ).all()

    return PerfilEstatisticas(
        total=total,
        ativos=ativos,
        inativos=total - ativos,
        usuarios_por_perfil=[PerfilUsoItem(id=i, nome=n, total_usuarios=c) for i, n, c in rows],
    )


def _get(db: Session, perfil_id: int) -> Optional[Perfil]:
    perfil = db.get(Perfil, perfil_id)
    if perfil is None or perfil.deleted_at is not None:
        return None
    return perfil


def _verificar_nome_unico(db: Session, nome: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(Perfil.id).where(func.lower(Perfil.nome) == nome.lower(), Perfil.deleted_at.is_(None))
    if exclude_id is not None:
        stmt = stmt.where(Perfil.id != exclude_id)
    if db.execute(stmt).scalar() is not None:
        raise ValueError(f"Já existe um perfil com o nome '{nome}'.")


def _replace_permissoes(db: Session, perfil_id: int, permissao_ids: Iterable[int]) -> None:
    """DELETE + INSERT das associações, sem commit (a transação é do chamador)."""
    ids = set(permissao_ids)
    if ids:
        existentes = set(db.execute(
            select(Permissao.id).where(Permissao.id.in_(ids), Permissao.ativo.is_(True))
        ).scalars().all())
        faltando = ids - existentes
        if faltando:
            db.rollback()
            raise ValueError(f"Permissões inválidas : {sorted(faltando)}")

    db.execute(delete(PerfilPermissao).where(PerfilPermissao.perfil_id == perfil_id))
    if ids:
        db.bulk_insert_mappings(PerfilPermissao, [
            {"perfil_id": perfil_id, "permissao_id": pid}
            for pid in sorted(ids)
        ])


def _permissao_ids(db: Session, perfil_id: int) -> list[int]:
    return list(db.execute(
        select(PerfilPermissao.permissao_id).where(PerfilPermissao.perfil_id == perfil_id)
    ).scalars().all())


def _contar_usuarios(db: Session, perfil_id: int) -> int:
    return db.execute(
        select(func.count())
        .select_from(Usuario)
        .where(Usuario.perfil_id == perfil_id, Usuario.deleted_at.is_(None))
    ).scalar() or 0


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValueError("Já existe um perfil com este nome.") from e


def _to_response(db: Session, perfil: Perfil, com_permissoes: bool = True) -> PerfilResponse:
    permissoes = []
    if com_permissoes:
        permissoes = db.execute(
            select(Permissao)
            .join(PerfilPermissao, PerfilPermissao.permissao_id == Permissao.id)
            .where(PerfilPermissao.perfil_id == perfil.id)
            .order_by(Permissao.modulo, Permissao.nome)
        ).scalars().all()

    return PerfilResponse(
        id=perfil.id,
        nome=perfil.nome,
        descricao=perfil.descricao,
        nivel_acesso=perfil.nivel_acesso,
        ativo=perfil.ativo,
        permissoes=[PermissaoResponse.model_validate(p) for p in permissoes],
        total_usuarios=_contar_usuarios(db, perfil.id),
        created_at=perfil.created_at,
        updated_at=perfil.updated_at,
    )
