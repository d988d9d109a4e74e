"""
Testes unitários do serviço de avaliações : gravação atômica da avaliação
pública e estatísticas.
"""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from igreja_api.models.avaliacao import Avaliacao, AvaliacaoCriterio
from igreja_api.schemas.avaliacao import AvaliacaoPublicaCreate
from igreja_api.services.audit_service import Ator
from igreja_api.services.avaliacao_service import create_avaliacao_publica, get_estatisticas


# --- Helpers ---

def make_payload(notas, culto_id=None, **kwargs) -> AvaliacaoPublicaCreate:
    return AvaliacaoPublicaCreate(
        culto_id=culto_id,
        data_visita=kwargs.get("data_visita", date(2026, 10, 11)),
        recomendaria=kwargs.get("recomendaria", True),
        criterios=[{"criterio_id": i, "nota": n} for i, n in notas],
    )


def make_db_mock(criterios_validos, culto=None):
    db = MagicMock()
    db.get.return_value = culto
    db.execute.return_value.scalars.return_value.all.return_value = criterios_validos
    return db


# ============================================================
# create_avaliacao_publica
# ============================================================

def test_avaliacao_completa_gravada_num_unico_commit():
    db = make_db_mock([1, 2, 3, 4, 5])
    payload = make_payload([(1, 3), (2, 5), (3, 2), (4, 5), (5, 1)])

    with patch("igreja_api.services.avaliacao_service._to_response") as mock_resp:
        create_avaliacao_publica(db, payload, Ator(ip="10.0.0.1"))

    avaliacao = db.add.call_args.args[0]
    assert isinstance(avaliacao, Avaliacao)
    assert avaliacao.ip_address == "10.0.0.1"
    assert avaliacao.avaliador_id is None

    notas = db.add_all.call_args.args[0]
    assert all(isinstance(n, AvaliacaoCriterio) for n in notas)
    assert [n.nota for n in notas] == [3, 5, 2, 5, 1]

    db.commit.assert_called_once()
    db.rollback.assert_not_called()
    mock_resp.assert_called_once()


def test_criterio_inexistente_desfaz_tudo():
    db = make_db_mock([1, 2])
    payload = make_payload([(1, 4), (2, 4), (9, 4)])

    with pytest.raises(ValueError, match=r"Critérios inválidos ou inativos : \[9\]"):
        create_avaliacao_publica(db, payload)

    db.add.assert_not_called()
    db.add_all.assert_not_called()
    db.commit.assert_not_called()
    db.rollback.assert_called_once()


def test_culto_inexistente():
    db = make_db_mock([1], culto=None)

    with pytest.raises(ValueError, match="Culto não encontrado"):
        create_avaliacao_publica(db, make_payload([(1, 5)], culto_id=42))

    db.commit.assert_not_called()
    db.rollback.assert_called_once()


def test_avaliador_identificado_pelo_ator():
    db = make_db_mock([1])

    with patch("igreja_api.services.avaliacao_service._to_response"):
        create_avaliacao_publica(db, make_payload([(1, 5)]), Ator(usuario_id=8))

    assert db.add.call_args.args[0].avaliador_id == 8


# ============================================================
# Validação do schema
# ============================================================

@pytest.mark.parametrize("nota", [0, 6])
def test_nota_fora_do_intervalo(nota):
    with pytest.raises(ValidationError):
        make_payload([(1, nota)])


def test_sem_criterios():
    with pytest.raises(ValidationError, match="Ao menos um critério"):
        make_payload([])


def test_criterio_repetido():
    with pytest.raises(ValidationError, match="mais de uma vez"):
        make_payload([(1, 4), (1, 5)])


# ============================================================
# get_estatisticas
# ============================================================

def test_estatisticas():
    db = MagicMock()
    db.execute.return_value.scalar.side_effect = [4, 3]
    db.execute.return_value.all.return_value = [(1, "Louvor", 4.3333, 3), (2, "Pregação", 5, 4)]

    stats = get_estatisticas(db)

    assert stats.total == 4
    assert stats.recomendariam == 3
    assert stats.percentual_recomendacao == 75
    assert stats.medias_por_criterio[0].media == 4.33
    assert stats.medias_por_criterio[1].total_respostas == 4


def test_estatisticas_sem_avaliacoes():
    db = MagicMock()
    db.execute.return_value.scalar.side_effect = [0, 0]
    db.execute.return_value.all.return_value = []

    stats = get_estatisticas(db)

    assert stats.percentual_recomendacao == 0
    assert stats.medias_por_criterio == []
