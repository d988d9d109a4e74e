"""
Configuração compartilhada por todos os testes.
Substitui a dependência get_db para evitar qualquer conexão real ao PostgreSQL
e a autenticação por um usuário fictício com as permissões escolhidas.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from igreja_api.database import get_db
from igreja_api.dependencies import UsuarioAutenticado, get_current_user
from igreja_api.main import app
from igreja_api.services.access_control import ResolvedPermissions


def make_usuario_autenticado(*codigos: str, usuario_id: int = 1, perfil_ativo: bool = True) -> UsuarioAutenticado:
    usuario = SimpleNamespace(id=usuario_id, email="teste@igreja.com", perfil_id=1, ativo=True, deleted_at=None)
    perfil = SimpleNamespace(id=1, nome="Teste", nivel_acesso=1, ativo=perfil_ativo, deleted_at=None)
    return UsuarioAutenticado(usuario=usuario, perfil=perfil, permissoes=ResolvedPermissions.of(codigos))


@pytest.fixture(autouse=True)
def sem_auditoria():
    """O log de auditoria é testado à parte : aqui ele não toca a sessão mockada."""
    with patch("igreja_api.services.audit_service.record") as mock:
        yield mock


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def client(mock_db):
    """Cliente HTTP de teste com a BDD mockada, autenticado como administrador."""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: make_usuario_autenticado("admin_sistema")
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def client_anonimo(mock_db):
    """Cliente sem usuário fictício : a autenticação real por Bearer token é executada."""
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def autenticar_como():
    """Troca o usuário fictício do `client` por um com as permissões informadas."""
    def _autenticar(*codigos: str, **kwargs):
        usuario = make_usuario_autenticado(*codigos, **kwargs)
        app.dependency_overrides[get_current_user] = lambda: usuario
        return usuario
    return _autenticar
