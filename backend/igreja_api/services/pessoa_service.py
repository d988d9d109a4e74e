"""
Serviço de pessoas (membros, obreiros, equipe).
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import extract, func, or_, select
from sqlalchemy.orm import Session

from igreja_api.models.pessoa import Pessoa
from igreja_api.models.referencia import CargoEclesiastico, Departamento
from igreja_api.models.usuario import Usuario
from igreja_api.schemas.common import PaginationInfo
from igreja_api.schemas.pessoa import (
    PessoaCreate,
    PessoaEstatisticas,
    PessoaResponse,
    PessoaUpdate,
)
from igreja_api.services import audit_service
from igreja_api.services.audit_service import Ator
from igreja_api.services.pagination import paginate

logger = logging.getLogger(__name__)


def calcular_idade(data_nascimento: Optional[date], hoje: Optional[date] = None) -> Optional[int]:
    if data_nascimento is None:
        return None
    hoje = hoje or date.today()
    idade = hoje.year - data_nascimento.year
    if (hoje.month, hoje.day) < (data_nascimento.month, data_nascimento.day):
        idade -= 1
    return idade


def abreviar_nome(nome_completo: str) -> str:
    """Ex.: "Maria das Graças Souza" → "Maria Souza"."""
    partes = nome_completo.split()
    if len(partes) <= 2:
        return " ".join(partes)
    return f"{partes[0]} {partes[-1]}"


def list_pessoas(
    db: Session,
    page: int,
    limit: int,
    busca: Optional[str] = None,
    cargo_id: Optional[int] = None,
    departamento_id: Optional[int] = None,
    ativo: Optional[bool] = None,
    membro: Optional[bool] = None,
) -> tuple[list[PessoaResponse], PaginationInfo]:
    stmt = select(Pessoa).where(Pessoa.deleted_at.is_(None))
    if busca:
        stmt = stmt.where(or_(
            Pessoa.nome_completo.ilike(f"%{busca}%"),
            Pessoa.telefone.ilike(f"%{busca}%"),
            Pessoa.email.ilike(f"%{busca}%"),
        ))
    if cargo_id is not None:
        stmt = stmt.where(Pessoa.cargo_eclesiastico_id == cargo_id)
    if departamento_id is not None:
        stmt = stmt.where(Pessoa.departamento_id == departamento_id)
    if ativo is not None:
        stmt = stmt.where(Pessoa.ativo.is_(ativo))
    if membro is not None:
        stmt = stmt.where(Pessoa.membro.is_(membro))

    pessoas, pagination = paginate(db, stmt.order_by(Pessoa.nome_completo), page, limit)
    return [_to_response(db, p) for p in pessoas], pagination


def get_pessoa(db: Session, pessoa_id: int) -> Optional[PessoaResponse]:
    pessoa = _get(db, pessoa_id)
    if pessoa is None:
        return None
    return _to_response(db, pessoa)


def create_pessoa(db: Session, data: PessoaCreate, ator: Optional[Ator] = None) -> PessoaResponse:
    _verificar_referencias(db, data.cargo_eclesiastico_id, data.departamento_id)
    _verificar_contato_unico(db, data.telefone, data.email)

    pessoa = Pessoa(**data.model_dump())
    db.add(pessoa)
    db.commit()
    db.refresh(pessoa)

    audit_service.record(db, ator, "pessoas", "CREATE", pessoa.id, dados_novos=audit_service.snapshot(pessoa))
    logger.info("Pessoa criada : %s (%s)", pessoa.nome_completo, pessoa.id)
    return _to_response(db, pessoa)


def update_pessoa(
    db: Session, pessoa_id: int, data: PessoaUpdate, ator: Optional[Ator] = None
) -> Optional[PessoaResponse]:
    pessoa = _get(db, pessoa_id)
    if pessoa is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    _verificar_referencias(db, changes.get("cargo_eclesiastico_id"), changes.get("departamento_id"))
    _verificar_contato_unico(db, changes.get("telefone"), changes.get("email"), exclude_id=pessoa.id)

    antes = audit_service.snapshot(pessoa)
    for field, value in changes.items():
        if field == "nome_completo" and value is None:
            continue
        setattr(pessoa, field, value)

    db.commit()
    db.refresh(pessoa)

    audit_service.record(db, ator, "pessoas", "UPDATE", pessoa.id, antes, audit_service.snapshot(pessoa))
    return _to_response(db, pessoa)


def delete_pessoa(db: Session, pessoa_id: int, ator: Optional[Ator] = None) -> bool:
    """
    Exclusão lógica de uma pessoa.
    Recusada enquanto um usuário ativo do sistema estiver vinculado a ela.
    """
    pessoa = _get(db, pessoa_id)
    if pessoa is None:
        return False

    if pessoa.usuario_id is not None:
        usuario = db.get(Usuario, pessoa.usuario_id)
        if usuario is not None and usuario.deleted_at is None:
            raise ValueError("Não é possível excluir pessoa que possui usuário associado")

    antes = audit_service.snapshot(pessoa)
    pessoa.deleted_at = datetime.now()
    pessoa.usuario_id = None
    db.commit()

    audit_service.record(db, ator, "pessoas", "DELETE", pessoa.id, dados_anteriores=antes)
    logger.info("Pessoa excluída : %s", pessoa.id)
    return True


def get_estatisticas(db: Session, hoje: Optional[date] = None) -> PessoaEstatisticas:
    hoje = hoje or date.today()
    base = select(func.count()).select_from(Pessoa).where(Pessoa.deleted_at.is_(None))
    total = db.execute(base).scalar() or 0
    ativos = db.execute(base.where(Pessoa.ativo.is_(True))).scalar() or 0
    membros = db.execute(base.where(Pessoa.membro.is_(True))).scalar() or 0

    por_cargo = db.execute(
        select(CargoEclesiastico.nome, func.count(Pessoa.id))
        .join(Pessoa, Pessoa.cargo_eclesiastico_id == CargoEclesiastico.id)
        .where(Pessoa.deleted_at.is_(None))
        .group_by(CargoEclesiastico.nome)
    ).all()
    por_departamento = db.execute(
        select(Departamento.nome, func.count(Pessoa.id))
        .join(Pessoa, Pessoa.departamento_id == Departamento.id)
        .where(Pessoa.deleted_at.is_(None))
        .group_by(Departamento.nome)
    ).all()
    aniversariantes = db.execute(
        select(Pessoa)
        .where(
            Pessoa.deleted_at.is_(None),
            Pessoa.ativo.is_(True),
            extract("month", Pessoa.data_nascimento) == hoje.month,
        )
        .order_by(extract("day", Pessoa.data_nascimento))
    ).scalars().all()

    return PessoaEstatisticas(
        total=total,
        ativos=ativos,
        inativos=total - ativos,
        membros=membros,
        por_cargo={nome: n for nome, n in por_cargo},
        por_departamento={nome: n for nome, n in por_departamento},
        aniversariantes_mes=[_to_response(db, p) for p in aniversariantes],
    )


def _get(db: Session, pessoa_id: int) -> Optional[Pessoa]:
    pessoa = db.get(Pessoa, pessoa_id)
    if pessoa is None or pessoa.deleted_at is not None:
        return None
    return pessoa


def _verificar_referencias(
    db: Session, cargo_id: Optional[int], departamento_id: Optional[int]
) -> None:
    if cargo_id is not None and db.get(CargoEclesiastico, cargo_id) is None:
        raise ValueError("Cargo eclesiástico não encontrado")
    if departamento_id is not None:
        departamento = db.get(Departamento, departamento_id)
        if departamento is None or departamento.deleted_at is not None:
            raise ValueError("Departamento não encontrado")


def _verificar_contato_unico(
    db: Session,
    telefone: Optional[str],
    email: Optional[str],
    exclude_id: Optional[int] = None,
) -> None:
    """Telefone e email são únicos entre pessoas não excluídas."""
    for coluna, valor, mensagem in (
        (Pessoa.telefone, telefone, "Já existe uma pessoa com este telefone"),
        (Pessoa.email, email, "Já existe uma pessoa com este email"),
    ):
        if not valor:
            continue
        stmt = select(Pessoa.id).where(coluna == valor, Pessoa.deleted_at.is_(None))
        if exclude_id is not None:
            stmt = stmt.where(Pessoa.id != exclude_id)
        if db.execute(stmt).scalar() is not None:
            raise ValueError(mensagem)


def _to_response(db: Session, pessoa: Pessoa) -> PessoaResponse:
    cargo = db.get(CargoEclesiastico, pessoa.cargo_eclesiastico_id) if pessoa.cargo_eclesiastico_id else None
    departamento = db.get(Departamento, pessoa.departamento_id) if pessoa.departamento_id else None

    return PessoaResponse(
        id=pessoa.id,
        nome_completo=pessoa.nome_completo,
        nome_abreviado=abreviar_nome(pessoa.nome_completo),
        telefone=pessoa.telefone,
        whatsapp=pessoa.whatsapp,
        email=pessoa.email,
        data_nascimento=pessoa.data_nascimento,
        idade=calcular_idade(pessoa.data_nascimento),
        endereco=pessoa.endereco,
        cargo_eclesiastico_id=pessoa.cargo_eclesiastico_id,
        cargo_nome=cargo.nome if cargo is not None else None,
        departamento_id=pessoa.departamento_id,
        departamento_nome=departamento.nome if departamento is not None else None,
        usuario_id=pessoa.usuario_id,
        membro=pessoa.membro,
        ativo=pessoa.ativo,
        observacoes=pessoa.observacoes,
        created_at=pessoa.created_at,
        updated_at=pessoa.updated_at,
    )
