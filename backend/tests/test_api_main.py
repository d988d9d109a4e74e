"""
Testes das rotas de saúde e do envelope de erro global.
"""

from unittest.mock import patch

from fastapi.testclient import TestClient

from igreja_api.database import get_db
from igreja_api.main import API_VERSION, app


def test_health(client_anonimo):
    response = client_anonimo.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "Igreja API", "version": API_VERSION}


def test_indice_da_api(client_anonimo):
    response = client_anonimo.get("/api")

    assert response.status_code == 200
    assert response.json()["endpoints"]["escalas"] == "/api/escalas"


def test_rota_inexistente_usa_envelope(client_anonimo):
    response = client_anonimo.get("/api/nao-existe")

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_excecao_nao_tratada_retorna_500(mock_db, autenticar_como):
    app.dependency_overrides[get_db] = lambda: mock_db
    autenticar_como("admin_sistema")
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            with patch("igreja_api.routers.pessoas.pessoa_service.get_pessoa") as mock:
                mock.side_effect = RuntimeError("falha inesperada")
                response = c.get("/api/pessoas/1")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Erro interno do servidor"
    assert body["detalhes"] == "falha inesperada"
