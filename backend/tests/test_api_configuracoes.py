"""
Testes de integração API das configurações e do log de auditoria.
"""

from datetime import date, datetime
from unittest.mock import patch

from igreja_api.schemas.common import PaginationInfo
from igreja_api.schemas.configuracao import LogAuditoriaResponse


# ============================================================
# GET / PUT /api/configuracoes
# ============================================================

def test_obter_configuracoes(client, autenticar_como):
    autenticar_como()
    with patch("igreja_api.routers.configuracoes.configuracao_service.obter") as mock:
        mock.return_value = {"nome_igreja": "Igreja Esperança", "redes_sociais": {}}
        response = client.get("/api/configuracoes")

    assert response.status_code == 200
    assert response.json()["data"]["nome_igreja"] == "Igreja Esperança"


def test_atualizar_configuracoes(client):
    with patch("igreja_api.routers.configuracoes.configuracao_service.atualizar") as mock:
        mock.return_value = {"nome_igreja": "Igreja Esperança"}
        response = client.put("/api/configuracoes", json={"nome_igreja": "Igreja Esperança"})

    assert response.status_code == 200
    assert response.json()["message"] == "Configurações atualizadas com sucesso"
    assert mock.call_args.args[1].model_dump(exclude_unset=True) == {"nome_igreja": "Igreja Esperança"}


def test_atualizar_chave_desconhecida(client):
    with patch("igreja_api.routers.configuracoes.configuracao_service.atualizar") as mock:
        response = client.put("/api/configuracoes", json={"tema": "escuro"})

    assert response.status_code == 400
    assert response.json()["detalhes"][0]["campo"] == "tema"
    mock.assert_not_called()


def test_atualizar_exige_manage_configuracoes(client, autenticar_como):
    autenticar_como("manage_cultos")
    response = client.put("/api/configuracoes", json={"nome_igreja": "Outra"})
    assert response.status_code == 403


# ============================================================
# GET /api/configuracoes/logs
# ============================================================

def test_list_logs(client):
    log = LogAuditoriaResponse(
        id=1, usuario_id=1, tabela="cultos", operacao="CREATE", registro_id=3,
        dados_novos={"titulo": "Culto de Domingo"}, created_at=datetime(2026, 10, 11, 10, 0),
    )
    with patch("igreja_api.routers.configuracoes.configuracao_service.list_logs") as mock:
        mock.return_value = ([log], PaginationInfo(page=1, limit=10, total=1, pages=1))
        response = client.get("/api/configuracoes/logs?tabela=cultos&operacao=create&data_inicio=2026-10-01")

    assert response.status_code == 200
    assert response.json()["data"][0]["dados_novos"]["titulo"] == "Culto de Domingo"
    kwargs = mock.call_args.kwargs
    assert kwargs["tabela"] == "cultos"
    assert kwargs["operacao"] == "create"
    assert kwargs["data_inicio"] == date(2026, 10, 1)


def test_list_logs_exige_read_relatorios(client, autenticar_como):
    autenticar_como("manage_configuracoes")
    response = client.get("/api/configuracoes/logs")
    assert response.status_code == 403
