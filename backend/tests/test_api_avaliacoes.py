"""
Testes de integração API das avaliações (formulário público e consulta).
"""

from datetime import date
from unittest.mock import patch

from igreja_api.schemas.avaliacao import AvaliacaoResponse, CriterioResponse, NotaCriterioResponse


# --- Helpers ---

PAYLOAD = {
    "data_visita": "2026-10-11",
    "recomendaria": True,
    "criterios": [
        {"criterio_id": 1, "nota": 3},
        {"criterio_id": 2, "nota": 5},
        {"criterio_id": 3, "nota": 2},
        {"criterio_id": 4, "nota": 5},
        {"criterio_id": 5, "nota": 1},
    ],
}


def make_avaliacao_response(avaliacao_id=1) -> AvaliacaoResponse:
    return AvaliacaoResponse(
        id=avaliacao_id,
        data_visita=date(2026, 10, 11),
        recomendaria=True,
        criterios=[NotaCriterioResponse(criterio_id=1, criterio_nome="Louvor", nota=3)],
        media=3.0,
    )


# ============================================================
# Rotas públicas
# ============================================================

def test_criterios_sem_autenticacao(client_anonimo):
    with patch("igreja_api.routers.avaliacoes.avaliacao_service.list_criterios") as mock:
        mock.return_value = [CriterioResponse(id=1, nome="Louvor", ordem_exibicao=1)]
        response = client_anonimo.get("/api/avaliacoes/criterios")

    assert response.status_code == 200
    assert response.json()["data"][0]["nome"] == "Louvor"


def test_avaliacao_publica_sem_autenticacao(client_anonimo):
    with patch("igreja_api.routers.avaliacoes.avaliacao_service.create_avaliacao_publica") as mock:
        mock.return_value = make_avaliacao_response()
        response = client_anonimo.post("/api/avaliacoes/publica", json=PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Avaliação enviada com sucesso. Obrigado!"
    assert [c.nota for c in mock.call_args.args[1].criterios] == [3, 5, 2, 5, 1]


def test_avaliacao_publica_nota_6_rejeitada(client_anonimo):
    payload = {**PAYLOAD, "criterios": [{"criterio_id": 1, "nota": 6}]}

    with patch("igreja_api.routers.avaliacoes.avaliacao_service.create_avaliacao_publica") as mock:
        response = client_anonimo.post("/api/avaliacoes/publica", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "Dados inválidos"
    mock.assert_not_called()


def test_avaliacao_publica_criterio_invalido(client_anonimo):
    with patch("igreja_api.routers.avaliacoes.avaliacao_service.create_avaliacao_publica") as mock:
        mock.side_effect = ValueError("Critérios inválidos ou inativos : [9]")
        response = client_anonimo.post("/api/avaliacoes/publica", json=PAYLOAD)

    assert response.status_code == 400
    assert response.json()["error"] == "Critérios inválidos ou inativos : [9]"


# ============================================================
# Rotas autenticadas
# ============================================================

def test_list_avaliacoes_exige_token(client_anonimo):
    response = client_anonimo.get("/api/avaliacoes")
    assert response.status_code == 401


def test_get_avaliacao(client):
    with patch("igreja_api.routers.avaliacoes.avaliacao_service.get_avaliacao") as mock:
        mock.return_value = make_avaliacao_response(5)
        response = client.get("/api/avaliacoes/5")

    assert response.status_code == 200
    assert response.json()["data"]["media"] == 3.0


def test_get_avaliacao_inexistente(client):
    with patch("igreja_api.routers.avaliacoes.avaliacao_service.get_avaliacao") as mock:
        mock.return_value = None
        response = client.get("/api/avaliacoes/99")

    assert response.status_code == 404
    assert response.json()["error"] == "Avaliação não encontrada"


def test_delete_avaliacao_exige_permissao(client, autenticar_como):
    autenticar_como("read_relatorios")
    response = client.delete("/api/avaliacoes/5")
    assert response.status_code == 403


def test_delete_avaliacao(client):
    with patch("igreja_api.routers.avaliacoes.avaliacao_service.delete_avaliacao") as mock:
        mock.return_value = True
        response = client.delete("/api/avaliacoes/5")

    assert response.status_code == 200
