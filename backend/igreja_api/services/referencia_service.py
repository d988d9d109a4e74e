"""
Serviço das tabelas de referência.

Funções, departamentos, cargos eclesiásticos, tipos de culto e formas de
conhecimento são listas curtas usadas nos formulários : as listagens não
são paginadas.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from igreja_api.models.escala import Escala
from igreja_api.models.pessoa import Pessoa
from igreja_api.models.referencia import (
    CargoEclesiastico,
    Departamento,
    FormaConhecimento,
    Funcao,
    TipoCulto,
)
from igreja_api.schemas.referencia import (
    CargoResponse,
    DepartamentoCreate,
    DepartamentoResponse,
    DepartamentoUpdate,
    FormaConhecimentoResponse,
    FuncaoCreate,
    FuncaoResponse,
    FuncaoUpdate,
    TipoCultoCreate,
    TipoCultoResponse,
    TipoCultoUpdate,
)
from igreja_api.services import audit_service
from igreja_api.services.audit_service import Ator

logger = logging.getLogger(__name__)


# ============================================================
# Funções
# ============================================================

def list_funcoes(db: Session, ativo: Optional[bool] = None) -> list[FuncaoResponse]:
    stmt = select(Funcao).where(Funcao.deleted_at.is_(None))
    if ativo is not None:
        stmt = stmt.where(Funcao.ativo.is_(ativo))
    funcoes = db.execute(stmt.order_by(Funcao.nome)).scalars().all()
    return [FuncaoResponse.model_validate(f) for f in funcoes]


def get_funcao(db: Session, funcao_id: int) -> Optional[FuncaoResponse]:
    funcao = _get_funcao(db, funcao_id)
    if funcao is None:
        return None
    return FuncaoResponse.model_validate(funcao)


def create_funcao(db: Session, data: FuncaoCreate, ator: Optional[Ator] = None) -> FuncaoResponse:
    _verificar_nome_unico(db, Funcao, data.nome, "Já existe uma função com este nome")

    funcao = Funcao(**data.model_dump())
    db.add(funcao)
    _commit(db, "Já existe uma função com este nome")
    db.refresh(funcao)

    audit_service.record(db, ator, "funcoes", "CREATE", funcao.id, dados_novos=audit_service.snapshot(funcao))
    logger.info("Função criada : %s (%s)", funcao.nome, funcao.id)
    return FuncaoResponse.model_validate(funcao)


def update_funcao(
    db: Session, funcao_id: int, data: FuncaoUpdate, ator: Optional[Ator] = None
) -> Optional[FuncaoResponse]:
    funcao = _get_funcao(db, funcao_id)
    if funcao is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    if changes.get("nome"):
        _verificar_nome_unico(db, Funcao, changes["nome"], "Já existe uma função com este nome", funcao.id)

    antes = audit_service.snapshot(funcao)
    for field, value in changes.items():
        if value is not None:
            setattr(funcao, field, value)
        elif field in {"descricao", "cor"}:
            setattr(funcao, field, None)

    _commit(db, "Já existe uma função com este nome")
    db.refresh(funcao)

    audit_service.record(db, ator, "funcoes", "UPDATE", funcao.id, antes, audit_service.snapshot(funcao))
    return FuncaoResponse.model_validate(funcao)


def delete_funcao(db: Session, funcao_id: int, ator: Optional[Ator] = None) -> bool:
    """Soft delete, recusado enquanto houver escalas não canceladas usando a função."""
    funcao = _get_funcao(db, funcao_id)
    if funcao is None:
        return False

    em_uso = db.execute(
        select(func.count())
        .select_from(Escala)
        .where(
            Escala.funcao_id == funcao.id,
            Escala.deleted_at.is_(None),
            Escala.status != "cancelada",
        )
    ).scalar() or 0
    if em_uso:
        raise ValueError(
            f"Não é possível excluir a função. Há {em_uso} escala(s) usando esta função."
        )

    antes = audit_service.snapshot(funcao)
    funcao.deleted_at = datetime.now()
    db.commit()

    audit_service.record(db, ator, "funcoes", "DELETE", funcao.id, dados_anteriores=antes)
    return True


# ============================================================
# Departamentos
# ============================================================

def list_departamentos(db: Session, ativo: Optional[bool] = None) -> list[DepartamentoResponse]:
    stmt = select(Departamento).where(Departamento.deleted_at.is_(None))
    if ativo is not None:
        stmt = stmt.where(Departamento.ativo.is_(ativo))
    departamentos = db.execute(stmt.order_by(Departamento.nome)).scalars().all()
    return [DepartamentoResponse.model_validate(d) for d in departamentos]


def get_departamento(db: Session, departamento_id: int) -> Optional[DepartamentoResponse]:
    departamento = _get_departamento(db, departamento_id)
    if departamento is None:
        return None
    return DepartamentoResponse.model_validate(departamento)


def create_departamento(
    db: Session, data: DepartamentoCreate, ator: Optional[Ator] = None
) -> DepartamentoResponse:
    _verificar_nome_unico(db, Departamento, data.nome, "Já existe um departamento com este nome")
    _verificar_responsavel(db, data.responsavel_id)

    departamento = Departamento(**data.model_dump())
    db.add(departamento)
    _commit(db, "Já existe um departamento com este nome")
    db.refresh(departamento)

    audit_service.record(
        db, ator, "departamentos", "CREATE", departamento.id,
        dados_novos=audit_service.snapshot(departamento),
    )
    return DepartamentoResponse.model_validate(departamento)


def update_departamento(
    db: Session, departamento_id: int, data: DepartamentoUpdate, ator: Optional[Ator] = None
) -> Optional[DepartamentoResponse]:
    departamento = _get_departamento(db, departamento_id)
    if departamento is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    if changes.get("nome"):
        _verificar_nome_unico(
            db, Departamento, changes["nome"], "Já existe um departamento com este nome", departamento.id
        )
    _verificar_responsavel(db, changes.get("responsavel_id"))

    antes = audit_service.snapshot(departamento)
    for field, value in changes.items():
        if value is None and field in {"nome", "ativo"}:
            continue
        setattr(departamento, field, value)

    _commit(db, "Já existe um departamento com este nome")
    db.refresh(departamento)

    audit_service.record(
        db, ator, "departamentos", "UPDATE", departamento.id, antes, audit_service.snapshot(departamento)
    )
    return DepartamentoResponse.model_validate(departamento)


# ============================================================
# Cargos eclesiásticos (somente leitura)
# ============================================================

def list_cargos(db: Session) -> list[CargoResponse]:
    cargos = db.execute(
        select(CargoEclesiastico)
        .where(CargoEclesiastico.ativo.is_(True))
        .order_by(CargoEclesiastico.nivel_hierarquia, CargoEclesiastico.nome)
    ).scalars().all()
    return [CargoResponse.model_validate(c) for c in cargos]


def get_cargo(db: Session, cargo_id: int) -> Optional[CargoResponse]:
    cargo = db.get(CargoEclesiastico, cargo_id)
    if cargo is None:
        return None
    return CargoResponse.model_validate(cargo)


# ============================================================
# Tipos de culto
# ============================================================

def list_tipos_cultos(db: Session, ativo: Optional[bool] = None) -> list[TipoCultoResponse]:
    stmt = select(TipoCulto)
    if ativo is not None:
        stmt = stmt.where(TipoCulto.ativo.is_(ativo))
    tipos = db.execute(stmt.order_by(TipoCulto.nome)).scalars().all()
    return [TipoCultoResponse.model_validate(t) for t in tipos]


def create_tipo_culto(
    db: Session, data: TipoCultoCreate, ator: Optional[Ator] = None
) -> TipoCultoResponse:
    _verificar_nome_unico(db, TipoCulto, data.nome, "Já existe um tipo de culto com este nome")

    tipo = TipoCulto(**data.model_dump())
    db.add(tipo)
    _commit(db, "Já existe um tipo de culto com este nome")
    db.refresh(tipo)

    audit_service.record(db, ator, "tipos_cultos", "CREATE", tipo.id, dados_novos=audit_service.snapshot(tipo))
    return TipoCultoResponse.model_validate(tipo)


def update_tipo_culto(
    db: Session, tipo_id: int, data: TipoCultoUpdate, ator: Optional[Ator] = None
) -> Optional[TipoCultoResponse]:
    tipo = db.get(TipoCulto, tipo_id)
    if tipo is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    if changes.get("nome"):
        _verificar_nome_unico(
            db, TipoCulto, changes["nome"], "Já existe um tipo de culto com este nome", tipo.id
        )

    antes = audit_service.snapshot(tipo)
    for field, value in changes.items():
        if value is None and field in {"nome", "ativo", "cor"}:
            continue
        setattr(tipo, field, value)

    _commit(db, "Já existe um tipo de culto com este nome")
    db.refresh(tipo)

    audit_service.record(db, ator, "tipos_cultos", "UPDATE", tipo.id, antes, audit_service.snapshot(tipo))
    return TipoCultoResponse.model_validate(tipo)


# ============================================================
# Formas de conhecimento (somente leitura)
# ============================================================

def list_formas_conhecimento(db: Session) -> list[FormaConhecimentoResponse]:
    formas = db.execute(
        select(FormaConhecimento)
        .where(FormaConhecimento.ativo.is_(True))
        .order_by(FormaConhecimento.nome)
    ).scalars().all()
    return [FormaConhecimentoResponse.model_validate(f) for f in formas]


def get_forma_conhecimento(db: Session, forma_id: int) -> Optional[FormaConhecimentoResponse]:
    forma = db.get(FormaConhecimento, forma_id)
    if forma is None:
        return None
    return FormaConhecimentoResponse.model_validate(forma)


# --- Helpers ---

def _get_funcao(db: Session, funcao_id: int) -> Optional[Funcao]:
    funcao = db.get(Funcao, funcao_id)
    if funcao is None or funcao.deleted_at is not None:
        return None
    return funcao


def _get_departamento(db: Session, departamento_id: int) -> Optional[Departamento]:
    departamento = db.get(Departamento, departamento_id)
    if departamento is None or departamento.deleted_at is not None:
        return None
    return departamento


def _verificar_nome_unico(db: Session, model, nome: str, mensagem: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(model.id).where(func.lower(model.nome) == nome.lower())
    if hasattr(model, "deleted_at"):
        stmt = stmt.where(model.deleted_at.is_(None))
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if db.execute(stmt).scalar() is not None:
        raise ValueError(mensagem)


def _verificar_responsavel(db: Session, responsavel_id: Optional[int]) -> None:
    if responsavel_id is None:
        return
    pessoa = db.get(Pessoa, responsavel_id)
    if pessoa is None or pessoa.deleted_at is not None:
        raise ValueError("Pessoa responsável não encontrada")


def _commit(db: Session, mensagem: str) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValueError(mensagem) from e
