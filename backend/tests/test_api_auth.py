"""
Testes de integração API da autenticação.
"""

from datetime import datetime
from unittest.mock import patch

from igreja_api.schemas.perfil import PerfilResumo
from igreja_api.schemas.usuario import LoginResponse, UsuarioMe
from igreja_api.services.auth_service import MSG_BLOQUEADO, AutenticacaoError


# --- Helpers ---

def make_usuario_me(**kwargs) -> UsuarioMe:
    return UsuarioMe(
        id=kwargs.get("id", 1),
        email=kwargs.get("email", "admin@igreja.com"),
        perfil_id=1,
        perfil=PerfilResumo(id=1, nome="Administrador", nivel_acesso=10),
        nome=kwargs.get("nome", "Administrador do Sistema"),
        ativo=True,
        email_verificado=True,
        created_at=datetime.now(),
        permissoes=kwargs.get("permissoes", ["admin_sistema"]),
    )


# ============================================================
# POST /api/auth/login
# ============================================================

def test_login_sucesso(client_anonimo):
    with patch("igreja_api.routers.auth.auth_service.autenticar") as mock:
        mock.return_value = LoginResponse(token="jwt-token", usuario=make_usuario_me())

        response = client_anonimo.post("/api/auth/login", json={"email": "admin@igreja.com", "senha": "123456"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["token"] == "jwt-token"
    assert body["data"]["usuario"]["permissoes"] == ["admin_sistema"]


def test_login_email_normalizado(client_anonimo):
    """O email chega ao serviço sem espaços e em minúsculas."""
    with patch("igreja_api.routers.auth.auth_service.autenticar") as mock:
        mock.return_value = LoginResponse(token="t", usuario=make_usuario_me())
        client_anonimo.post("/api/auth/login", json={"email": "  Admin@Igreja.COM ", "senha": "123456"})

    assert mock.call_args.args[1] == "admin@igreja.com"


def test_login_credenciais_invalidas(client_anonimo):
    with patch("igreja_api.routers.auth.auth_service.autenticar") as mock:
        mock.side_effect = AutenticacaoError("Credenciais inválidas")
        response = client_anonimo.post("/api/auth/login", json={"email": "a@b.com", "senha": "errada"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Credenciais inválidas"}


def test_login_conta_bloqueada(client_anonimo):
    with patch("igreja_api.routers.auth.auth_service.autenticar") as mock:
        mock.side_effect = AutenticacaoError(MSG_BLOQUEADO)
        response = client_anonimo.post("/api/auth/login", json={"email": "a@b.com", "senha": "x"})

    assert response.status_code == 401
    assert response.json()["error"] == MSG_BLOQUEADO


def test_login_sem_senha(client_anonimo):
    """Campo obrigatório ausente → 400 com o detalhe do campo."""
    response = client_anonimo.post("/api/auth/login", json={"email": "a@b.com"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Dados inválidos"
    assert body["detalhes"][0]["campo"] == "senha"


# ============================================================
# GET /api/auth/me, /verify  ·  POST /api/auth/logout
# ============================================================

def test_me_retorna_usuario_com_permissoes(client):
    with patch("igreja_api.routers.auth.auth_service.montar_usuario_me") as mock:
        mock.return_value = make_usuario_me(permissoes=["read_cultos"])
        response = client.get("/api/auth/me")

    assert response.status_code == 200
    assert response.json()["data"]["permissoes"] == ["read_cultos"]


def test_verify(client):
    with patch("igreja_api.routers.auth.auth_service.montar_usuario_me") as mock:
        mock.return_value = make_usuario_me()
        response = client.get("/api/auth/verify")

    assert response.status_code == 200
    assert response.json()["data"]["valid"] is True


def test_me_sem_token(client_anonimo):
    response = client_anonimo.get("/api/auth/me")
    assert response.status_code == 401


def test_logout_registra_auditoria(client):
    with patch("igreja_api.routers.auth.auth_service.registrar_logout") as mock:
        response = client.post("/api/auth/logout")

    assert response.status_code == 200
    assert response.json()["message"] == "Logout realizado com sucesso"
    assert mock.call_args.args[1] == 1
