"""
Testes de integração API dos usuários do sistema.
"""

from unittest.mock import patch

from igreja_api.schemas.perfil import PerfilResumo
from igreja_api.schemas.usuario import UsuarioResponse


# --- Helpers ---

def make_usuario_response(**kwargs) -> UsuarioResponse:
    return UsuarioResponse(
        id=kwargs.get("id", 2),
        email=kwargs.get("email", "ana@igreja.com"),
        perfil_id=kwargs.get("perfil_id", 3),
        perfil=PerfilResumo(id=3, nome="Secretaria", nivel_acesso=5),
        ativo=kwargs.get("ativo", True),
        email_verificado=False,
    )


# ============================================================
# CRUD
# ============================================================

def test_create_usuario(client):
    with patch("igreja_api.routers.usuarios.usuario_service.create_usuario") as mock:
        mock.return_value = make_usuario_response()
        response = client.post("/api/usuarios", json={
            "email": "Ana@Igreja.com", "senha": "segredo123", "perfil_id": 3,
        })

    assert response.status_code == 201
    assert "senha" not in response.json()["data"]
    assert "senha_hash" not in response.json()["data"]
    assert mock.call_args.args[1].email == "ana@igreja.com"


def test_create_usuario_senha_curta(client):
    response = client.post("/api/usuarios", json={"email": "ana@igreja.com", "senha": "123", "perfil_id": 3})

    assert response.status_code == 400
    assert response.json()["detalhes"][0]["mensagem"] == "A senha deve ter pelo menos 6 caracteres."


def test_create_usuario_email_duplicado(client):
    with patch("igreja_api.routers.usuarios.usuario_service.create_usuario") as mock:
        mock.side_effect = ValueError("Email já cadastrado")
        response = client.post("/api/usuarios", json={"email": "ana@igreja.com", "senha": "segredo123", "perfil_id": 3})

    assert response.status_code == 400


def test_list_usuarios_exige_manage(client, autenticar_como):
    autenticar_como("read_pessoas")
    response = client.get("/api/usuarios")
    assert response.status_code == 403


def test_get_usuario_inexistente(client):
    with patch("igreja_api.routers.usuarios.usuario_service.get_usuario") as mock:
        mock.return_value = None
        response = client.get("/api/usuarios/99")

    assert response.status_code == 404
    assert response.json()["error"] == "Usuário não encontrado"


def test_delete_propria_conta(client):
    with patch("igreja_api.routers.usuarios.usuario_service.delete_usuario") as mock:
        mock.side_effect = ValueError("Você não pode excluir sua própria conta.")
        response = client.delete("/api/usuarios/1")

    assert response.status_code == 400


def test_toggle_ativo(client):
    with patch("igreja_api.routers.usuarios.usuario_service.toggle_ativo") as mock:
        mock.return_value = make_usuario_response(ativo=False)
        response = client.patch("/api/usuarios/2/toggle-ativo")

    assert response.status_code == 200
    assert response.json()["message"] == "Usuário desativado com sucesso"


# ============================================================
# Senhas
# ============================================================

def test_alterar_propria_senha(client):
    with patch("igreja_api.routers.usuarios.usuario_service.alterar_senha") as mock:
        response = client.put("/api/usuarios/1/senha", json={"senha_atual": "antiga123", "nova_senha": "nova12345"})

    assert response.status_code == 200
    mock.assert_called_once()


def test_alterar_senha_de_outro_usuario(client):
    with patch("igreja_api.routers.usuarios.usuario_service.alterar_senha") as mock:
        response = client.put("/api/usuarios/2/senha", json={"senha_atual": "antiga123", "nova_senha": "nova12345"})

    assert response.status_code == 403
    assert response.json()["error"] == "Você só pode alterar sua própria senha"
    mock.assert_not_called()


def test_alterar_senha_atual_incorreta(client):
    with patch("igreja_api.routers.usuarios.usuario_service.alterar_senha") as mock:
        mock.side_effect = ValueError("Senha atual incorreta")
        response = client.put("/api/usuarios/1/senha", json={"senha_atual": "errada1", "nova_senha": "nova12345"})

    assert response.status_code == 400


def test_resetar_senha(client):
    with patch("igreja_api.routers.usuarios.usuario_service.resetar_senha") as mock:
        response = client.put("/api/usuarios/2/resetar-senha", json={"nova_senha": "provisoria1"})

    assert response.status_code == 200
    assert mock.call_args.args[2] == "provisoria1"
