"""
Testes unitários da trilha de auditoria.
O fixture `sem_auditoria` só substitui o atributo do módulo : as funções
importadas aqui são as originais.
"""

from datetime import datetime
from unittest.mock import MagicMock

from igreja_api.models.auditoria import LogAuditoria
from igreja_api.models.usuario import Usuario
from igreja_api.services.audit_service import Ator, record, snapshot


# ============================================================
# record
# ============================================================

def test_record_grava_log_com_ator():
    db = MagicMock()

    record(db, Ator(usuario_id=3, ip="10.0.0.9", user_agent="pytest"), "cultos", "CREATE", 12, dados_novos={"id": 12})

    log = db.add.call_args.args[0]
    assert isinstance(log, LogAuditoria)
    assert log.usuario_id == 3
    assert log.tabela == "cultos"
    assert log.operacao == "CREATE"
    assert log.registro_id == 12
    assert log.ip_address == "10.0.0.9"
    assert log.dados_novos == {"id": 12}
    db.commit.assert_called_once()


def test_record_sem_ator():
    db = MagicMock()

    record(db, None, "avaliacoes", "CREATE", 1)

    assert db.add.call_args.args[0].usuario_id is None


def test_record_falha_nao_propaga(caplog):
    db = MagicMock()
    db.commit.side_effect = RuntimeError("conexão perdida")

    record(db, Ator(usuario_id=1), "pessoas", "DELETE", 4)

    db.rollback.assert_called_once()
    assert "Falha ao registrar auditoria" in caplog.text


def test_record_operacao_invalida_apenas_logada(caplog):
    db = MagicMock()

    record(db, None, "pessoas", "PURGE", 4)

    db.add.assert_not_called()
    db.rollback.assert_called_once()
    assert "PURGE" in caplog.text


# ============================================================
# snapshot
# ============================================================

def test_snapshot_omite_senha():
    usuario = Usuario(id=1, email="ana@igreja.com", senha_hash="$2b$12$abc", perfil_id=2, ativo=True)

    dados = snapshot(usuario)

    assert "senha_hash" not in dados
    assert dados["email"] == "ana@igreja.com"
    assert dados["perfil_id"] == 2


def test_snapshot_serializa_datas():
    usuario = Usuario(id=1, email="ana@igreja.com", ultimo_login=datetime(2026, 10, 11, 19, 30))

    assert snapshot(usuario)["ultimo_login"] == "2026-10-11T19:30:00"


def test_snapshot_objeto_sem_tabela():
    assert snapshot(object()) is None
