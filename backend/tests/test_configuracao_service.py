"""
Testes unitários do serviço de configurações.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from igreja_api.models.configuracao import Configuracao
from igreja_api.schemas.configuracao import ConfiguracoesUpdate
from igreja_api.services.audit_service import Ator
from igreja_api.services.configuracao_service import DEFAULTS, atualizar, obter


def make_db_mock(*consultas):
    db = MagicMock()
    db.execute.return_value.scalars.return_value.all.side_effect = list(consultas)
    return db


# ============================================================
# obter
# ============================================================

def test_obter_sem_linhas_retorna_padroes():
    assert obter(make_db_mock([])) == DEFAULTS


def test_obter_sobrepoe_valores_gravados():
    linhas = [SimpleNamespace(chave="nome_igreja", valor="Igreja Esperança")]

    configuracoes = obter(make_db_mock(linhas))

    assert configuracoes["nome_igreja"] == "Igreja Esperança"
    assert configuracoes["horarios_cultos"] == DEFAULTS["horarios_cultos"]


def test_obter_nao_altera_padroes():
    configuracoes = obter(make_db_mock([]))
    configuracoes["horarios_cultos"]["domingo_manha"] = "10:00"

    assert DEFAULTS["horarios_cultos"]["domingo_manha"] == "09:00"


# ============================================================
# atualizar
# ============================================================

def test_atualizar_insere_e_atualiza():
    existente = SimpleNamespace(chave="nome_igreja", valor="Igreja", updated_by=None)
    db = make_db_mock([existente], [existente])

    resultado = atualizar(
        db, ConfiguracoesUpdate(nome_igreja="Igreja Esperança", telefone="(11) 3333-4444"), Ator(usuario_id=5)
    )

    assert existente.valor == "Igreja Esperança"
    assert existente.updated_by == 5
    nova = db.add.call_args.args[0]
    assert isinstance(nova, Configuracao)
    assert nova.chave == "telefone"
    assert nova.updated_by == 5
    assert resultado["telefone"] == "(11) 3333-4444"
    assert resultado["horarios_cultos"] == DEFAULTS["horarios_cultos"]
    db.commit.assert_called_once()


def test_atualizar_audita_antes_e_depois(sem_auditoria):
    db = make_db_mock([], [])

    atualizar(db, ConfiguracoesUpdate(site="https://igreja.org"))

    args = sem_auditoria.call_args.args
    assert args[2] == "configuracoes"
    assert args[3] == "UPDATE"
    assert args[5]["site"] is None
    assert args[6]["site"] == "https://igreja.org"


# ============================================================
# Validação
# ============================================================

def test_chave_desconhecida_rejeitada():
    with pytest.raises(ValidationError):
        ConfiguracoesUpdate(cor_tema="azul")


def test_email_invalido():
    with pytest.raises(ValidationError, match="Email inválido"):
        ConfiguracoesUpdate(email="contato@igreja")


def test_nome_igreja_vazio():
    with pytest.raises(ValidationError, match="Nome da igreja é obrigatório"):
        ConfiguracoesUpdate(nome_igreja="   ")
