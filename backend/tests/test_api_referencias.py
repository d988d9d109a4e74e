"""
Testes de integração API das tabelas de referência.
"""

from unittest.mock import patch

from igreja_api.schemas.referencia import (
    CargoResponse,
    DepartamentoResponse,
    FormaConhecimentoResponse,
    FuncaoResponse,
    TipoCultoResponse,
)


# ============================================================
# Funções
# ============================================================

def test_list_funcoes_qualquer_usuario_autenticado(client, autenticar_como):
    autenticar_como()
    with patch("igreja_api.routers.funcoes.referencia_service.list_funcoes") as mock:
        mock.return_value = [FuncaoResponse(id=1, nome="Som", requer_confirmacao=True, ativo=True)]
        response = client.get("/api/funcoes?ativo=true")

    assert response.status_code == 200
    assert response.json()["data"][0]["nome"] == "Som"
    assert mock.call_args.args[1] is True


def test_list_funcoes_sem_token(client_anonimo):
    response = client_anonimo.get("/api/funcoes")
    assert response.status_code == 401


def test_create_funcao_exige_manage_escalas(client, autenticar_como):
    autenticar_como("read_escalas")
    response = client.post("/api/funcoes", json={"nome": "Som"})
    assert response.status_code == 403


def test_create_funcao_cor_invalida(client):
    response = client.post("/api/funcoes", json={"nome": "Som", "cor": "azul"})

    assert response.status_code == 400
    assert response.json()["detalhes"][0]["campo"] == "cor"


def test_delete_funcao_em_uso(client):
    with patch("igreja_api.routers.funcoes.referencia_service.delete_funcao") as mock:
        mock.side_effect = ValueError("Não é possível excluir a função. Há 2 escala(s) usando esta função.")
        response = client.delete("/api/funcoes/1")

    assert response.status_code == 400
    assert "2 escala(s)" in response.json()["error"]


def test_get_funcao_inexistente(client):
    with patch("igreja_api.routers.funcoes.referencia_service.get_funcao") as mock:
        mock.return_value = None
        response = client.get("/api/funcoes/99")

    assert response.status_code == 404
    assert response.json()["error"] == "Função não encontrada"


# ============================================================
# Departamentos
# ============================================================

def test_create_departamento(client):
    with patch("igreja_api.routers.departamentos.referencia_service.create_departamento") as mock:
        mock.return_value = DepartamentoResponse(id=2, nome="Louvor", ativo=True)
        response = client.post("/api/departamentos", json={"nome": "Louvor"})

    assert response.status_code == 201
    assert response.json()["message"] == "Departamento criado com sucesso"


def test_create_departamento_responsavel_inexistente(client):
    with patch("igreja_api.routers.departamentos.referencia_service.create_departamento") as mock:
        mock.side_effect = ValueError("Pessoa responsável não encontrada")
        response = client.post("/api/departamentos", json={"nome": "Louvor", "responsavel_id": 9})

    assert response.status_code == 404


# ============================================================
# Somente leitura
# ============================================================

def test_list_cargos(client):
    with patch("igreja_api.routers.cargos.referencia_service.list_cargos") as mock:
        mock.return_value = [CargoResponse(id=1, nome="Pastor", nivel_hierarquia=1, ativo=True)]
        response = client.get("/api/cargos")

    assert response.status_code == 200
    assert response.json()["data"][0]["nome"] == "Pastor"


def test_cargos_nao_aceitam_escrita(client):
    response = client.post("/api/cargos", json={"nome": "Bispo"})
    assert response.status_code == 405


def test_list_formas_conhecimento(client):
    with patch("igreja_api.routers.formas_conhecimento.referencia_service.list_formas_conhecimento") as mock:
        mock.return_value = [FormaConhecimentoResponse(id=1, nome="Convite de amigo", ativo=True)]
        response = client.get("/api/formas-conhecimento")

    assert response.status_code == 200


# ============================================================
# Tipos de culto
# ============================================================

def test_create_tipo_culto(client):
    with patch("igreja_api.routers.tipos_cultos.referencia_service.create_tipo_culto") as mock:
        mock.return_value = TipoCultoResponse(id=1, nome="Santa Ceia", cor="#FF6B35", ativo=True)
        response = client.post("/api/tipos-cultos", json={"nome": "Santa Ceia"})

    assert response.status_code == 201
    assert mock.call_args.args[1].cor == "#FF6B35"


def test_create_tipo_culto_exige_manage_cultos(client, autenticar_como):
    autenticar_como("read_cultos")
    response = client.post("/api/tipos-cultos", json={"nome": "Santa Ceia"})
    assert response.status_code == 403


def test_update_tipo_culto_inexistente(client):
    with patch("igreja_api.routers.tipos_cultos.referencia_service.update_tipo_culto") as mock:
        mock.return_value = None
        response = client.put("/api/tipos-cultos/9", json={"ativo": False})

    assert response.status_code == 404
