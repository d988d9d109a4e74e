"""
Testes de integração API das atividades.
"""

from unittest.mock import patch

from igreja_api.schemas.atividade import AtividadePessoaResponse, AtividadeResponse


# --- Helpers ---

def make_atividade_response(**kwargs) -> AtividadeResponse:
    return AtividadeResponse(
        id=kwargs.get("id", 4),
        culto_id=kwargs.get("culto_id", 1),
        titulo=kwargs.get("titulo", "Louvor"),
        ordem_programacao=kwargs.get("ordem_programacao", 1),
        pessoas=[AtividadePessoaResponse(pessoa_id=3, nome_completo="Ana Lima", confirmado=False)],
    )


# ============================================================
# Testes
# ============================================================

def test_create_atividade(client):
    with patch("igreja_api.routers.atividades.atividade_service.create_atividade") as mock:
        mock.return_value = make_atividade_response()
        response = client.post("/api/atividades", json={
            "culto_id": 1, "titulo": "Louvor", "pessoas": [{"pessoa_id": 3}],
        })

    assert response.status_code == 201
    assert response.json()["data"]["pessoas"][0]["nome_completo"] == "Ana Lima"


def test_create_atividade_ordem_invalida(client):
    response = client.post("/api/atividades", json={"culto_id": 1, "titulo": "Louvor", "ordem_programacao": 0})
    assert response.status_code == 400


def test_create_atividade_exige_manage_cultos(client, autenticar_como):
    autenticar_como("read_cultos")
    response = client.post("/api/atividades", json={"culto_id": 1, "titulo": "Louvor"})
    assert response.status_code == 403


def test_list_por_culto(client, autenticar_como):
    autenticar_como("read_cultos")
    with patch("igreja_api.routers.atividades.atividade_service.list_por_culto") as mock:
        mock.return_value = [make_atividade_response(), make_atividade_response(id=5, ordem_programacao=2)]
        response = client.get("/api/atividades/culto/1")

    assert response.status_code == 200
    assert [a["ordem_programacao"] for a in response.json()["data"]] == [1, 2]


def test_list_por_culto_inexistente(client):
    with patch("igreja_api.routers.atividades.atividade_service.list_por_culto") as mock:
        mock.side_effect = ValueError("Culto não encontrado")
        response = client.get("/api/atividades/culto/99")

    assert response.status_code == 404


def test_delete_atividade_inexistente(client):
    with patch("igreja_api.routers.atividades.atividade_service.delete_atividade") as mock:
        mock.return_value = False
        response = client.delete("/api/atividades/99")

    assert response.status_code == 404
