"""
Testes unitários do serviço de atividades (programação do culto).
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from igreja_api.models.atividade import AtividadePessoa
from igreja_api.schemas.atividade import AtividadeCreate, AtividadeUpdate
from igreja_api.services.atividade_service import create_atividade, delete_atividade, update_atividade


# --- Helpers ---

def make_culto(culto_id=1):
    return SimpleNamespace(id=culto_id, deleted_at=None)


def make_atividade(atividade_id=4):
    return SimpleNamespace(id=atividade_id, titulo="Louvor", ordem_programacao=1, deleted_at=None)


def make_db_mock(get=None, ids_existentes=None):
    db = MagicMock()
    db.get.return_value = get
    db.execute.return_value.scalars.return_value.all.return_value = ids_existentes or []
    return db


# ============================================================
# create_atividade
# ============================================================

def test_create_atividade_culto_inexistente():
    db = make_db_mock(get=None)

    with pytest.raises(ValueError, match="Culto não encontrado"):
        create_atividade(db, AtividadeCreate(culto_id=9, titulo="Louvor"))

    db.add.assert_not_called()


def test_create_atividade_com_pessoas():
    db = make_db_mock(get=make_culto(), ids_existentes=[3, 5])
    payload = AtividadeCreate(
        culto_id=1, titulo="Louvor", pessoas=[{"pessoa_id": 3, "papel": "Ministro"}, {"pessoa_id": 5}],
    )

    with patch("igreja_api.services.atividade_service._to_response"):
        create_atividade(db, payload)

    db.bulk_insert_mappings.assert_called_once()
    modelo, linhas = db.bulk_insert_mappings.call_args.args
    assert modelo is AtividadePessoa
    assert [linha["pessoa_id"] for linha in linhas] == [3, 5]
    assert linhas[0]["papel"] == "Ministro"
    db.commit.assert_called_once()


def test_create_atividade_pessoa_inexistente_desfaz():
    db = make_db_mock(get=make_culto(), ids_existentes=[3])
    payload = AtividadeCreate(culto_id=1, titulo="Louvor", pessoas=[{"pessoa_id": 3}, {"pessoa_id": 8}])

    with pytest.raises(ValueError, match=r"Pessoas inexistentes : \[8\]"):
        create_atividade(db, payload)

    db.rollback.assert_called_once()
    db.commit.assert_not_called()


def test_create_atividade_pessoa_repetida():
    db = make_db_mock(get=make_culto(), ids_existentes=[3])
    payload = AtividadeCreate(culto_id=1, titulo="Louvor", pessoas=[{"pessoa_id": 3}, {"pessoa_id": 3}])

    with pytest.raises(ValueError, match="duas vezes"):
        create_atividade(db, payload)

    db.commit.assert_not_called()


# ============================================================
# update / delete
# ============================================================

def test_update_atividade_sem_listas_mantem_associacoes():
    atividade = make_atividade()
    db = make_db_mock(get=atividade)

    with patch("igreja_api.services.atividade_service._to_response"):
        update_atividade(db, 4, AtividadeUpdate(titulo="Louvor e adoração"))

    assert atividade.titulo == "Louvor e adoração"
    db.bulk_insert_mappings.assert_not_called()
    db.commit.assert_called_once()


def test_update_atividade_inexistente():
    assert update_atividade(make_db_mock(get=None), 4, AtividadeUpdate(titulo="X")) is None


def test_delete_atividade():
    atividade = make_atividade()
    assert delete_atividade(make_db_mock(get=atividade), 4) is True
    assert atividade.deleted_at is not None
