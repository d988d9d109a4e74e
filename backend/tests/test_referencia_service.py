"""
Testes unitários das tabelas de referência (funções, departamentos, tipos de culto).
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from igreja_api.models.referencia import Funcao
from igreja_api.schemas.referencia import DepartamentoCreate, FuncaoCreate, TipoCultoCreate
from igreja_api.services.referencia_service import (
    create_departamento,
    create_funcao,
    create_tipo_culto,
    delete_funcao,
)


# --- Helpers ---

def make_funcao(funcao_id=1):
    return SimpleNamespace(id=funcao_id, nome="Som", deleted_at=None)


# ============================================================
# Funções
# ============================================================

def test_create_funcao_nome_duplicado():
    db = MagicMock()
    db.execute.return_value.scalar.return_value = 4

    with pytest.raises(ValueError, match="Já existe uma função com este nome"):
        create_funcao(db, FuncaoCreate(nome="som"))

    db.add.assert_not_called()


def test_create_funcao_corrida_no_indice_unico():
    db = MagicMock()
    db.execute.return_value.scalar.return_value = None
    db.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

    with pytest.raises(ValueError, match="Já existe uma função com este nome"):
        create_funcao(db, FuncaoCreate(nome="Som"))

    db.rollback.assert_called_once()


def test_create_funcao():
    db = MagicMock()
    db.execute.return_value.scalar.return_value = None

    def _refresh(obj):
        obj.id = 3
        obj.ativo = True

    db.refresh.side_effect = _refresh

    funcao = create_funcao(db, FuncaoCreate(nome=" Projeção ", cor="#a1b2c3"))

    assert isinstance(db.add.call_args.args[0], Funcao)
    assert funcao.nome == "Projeção"
    assert funcao.cor == "#A1B2C3"
    assert funcao.requer_confirmacao is True


def test_delete_funcao_em_uso():
    funcao = make_funcao()
    db = MagicMock()
    db.get.return_value = funcao
    db.execute.return_value.scalar.return_value = 2

    with pytest.raises(ValueError) as exc:
        delete_funcao(db, 1)

    assert str(exc.value) == "Não é possível excluir a função. Há 2 escala(s) usando esta função."
    assert funcao.deleted_at is None


def test_delete_funcao_sem_escalas():
    funcao = make_funcao()
    db = MagicMock()
    db.get.return_value = funcao
    db.execute.return_value.scalar.return_value = 0

    assert delete_funcao(db, 1) is True
    assert funcao.deleted_at is not None


def test_delete_funcao_inexistente():
    db = MagicMock()
    db.get.return_value = None
    assert delete_funcao(db, 9) is False


# ============================================================
# Departamentos e tipos de culto
# ============================================================

def test_create_departamento_responsavel_inexistente():
    db = MagicMock()
    db.execute.return_value.scalar.return_value = None
    db.get.return_value = None

    with pytest.raises(ValueError, match="Pessoa responsável não encontrada"):
        create_departamento(db, DepartamentoCreate(nome="Louvor", responsavel_id=7))


def test_create_tipo_culto_nome_duplicado():
    db = MagicMock()
    db.execute.return_value.scalar.return_value = 1

    with pytest.raises(ValueError, match="Já existe um tipo de culto com este nome"):
        create_tipo_culto(db, TipoCultoCreate(nome="Culto de Domingo"))


@pytest.mark.parametrize("cor", ["vermelho", "#FFF", "#GG0000"])
def test_cor_invalida(cor):
    with pytest.raises(ValueError, match="hexadecimal"):
        TipoCultoCreate(nome="Santa Ceia", cor=cor)
