"""
Testes de integração API dos visitantes.
"""

from datetime import date
from unittest.mock import patch

from igreja_api.schemas.common import PaginationInfo
from igreja_api.schemas.visitante import VisitanteEstatisticas, VisitanteResponse


# --- Helpers ---

def make_visitante_response(**kwargs) -> VisitanteResponse:
    return VisitanteResponse(
        id=kwargs.get("id", 1),
        nome_completo=kwargs.get("nome_completo", "Carlos Pereira"),
        eh_cristao=kwargs.get("eh_cristao", False),
        mora_perto=kwargs.get("mora_perto", True),
        data_visita=kwargs.get("data_visita", date(2026, 10, 11)),
        cadastrado_por=kwargs.get("cadastrado_por", 1),
    )


# ============================================================
# Testes
# ============================================================

def test_create_visitante(client):
    with patch("igreja_api.routers.visitantes.visitante_service.create_visitante") as mock:
        mock.return_value = make_visitante_response()
        response = client.post("/api/visitantes", json={
            "nome_completo": "Carlos Pereira",
            "data_visita": "2026-10-11",
            "mora_perto": True,
        })

    assert response.status_code == 201
    assert response.json()["data"]["cadastrado_por"] == 1
    assert mock.call_args.args[2].usuario_id == 1


def test_create_visitante_sem_data_visita(client):
    response = client.post("/api/visitantes", json={"nome_completo": "Carlos Pereira"})

    assert response.status_code == 400
    assert response.json()["detalhes"][0]["campo"] == "data_visita"


def test_create_visitante_culto_inexistente(client):
    with patch("igreja_api.routers.visitantes.visitante_service.create_visitante") as mock:
        mock.side_effect = ValueError("Culto não encontrado")
        response = client.post("/api/visitantes", json={"nome_completo": "Carlos", "data_visita": "2026-10-11", "culto_id": 9})

    assert response.status_code == 404


def test_list_visitantes_periodo(client):
    with patch("igreja_api.routers.visitantes.visitante_service.list_visitantes") as mock:
        mock.return_value = ([make_visitante_response()], PaginationInfo(page=1, limit=10, total=1, pages=1))
        response = client.get("/api/visitantes?data_inicio=2026-10-01&data_fim=2026-10-31")

    assert response.status_code == 200
    assert mock.call_args.kwargs["data_inicio"] == date(2026, 10, 1)
    assert mock.call_args.kwargs["data_fim"] == date(2026, 10, 31)


def test_list_visitantes_sem_permissao(client, autenticar_como):
    autenticar_como("read_pessoas")
    response = client.get("/api/visitantes")
    assert response.status_code == 403


def test_estatisticas(client):
    with patch("igreja_api.routers.visitantes.visitante_service.get_estatisticas") as mock:
        mock.return_value = VisitanteEstatisticas(
            total=4, hoje=1, mes=3, ano=4, cristaos=1, nao_cristaos=3, percentual_cristaos=25,
        )
        response = client.get("/api/visitantes/estatisticas")

    assert response.status_code == 200
    assert response.json()["data"]["percentual_cristaos"] == 25


def test_update_visitante_inexistente(client):
    with patch("igreja_api.routers.visitantes.visitante_service.update_visitante") as mock:
        mock.return_value = None
        response = client.put("/api/visitantes/99", json={"observacoes": "Retornou"})

    assert response.status_code == 404


def test_delete_visitante(client):
    with patch("igreja_api.routers.visitantes.visitante_service.delete_visitante") as mock:
        mock.return_value = True
        response = client.delete("/api/visitantes/1")

    assert response.status_code == 200
    assert response.json()["message"] == "Visitante excluído com sucesso"
