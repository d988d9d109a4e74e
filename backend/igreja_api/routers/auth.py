"""
Router de autenticação : login, sessão atual, verificação do token e logout.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import (
    UsuarioAutenticado,
    get_ator,
    get_ator_anonimo,
    get_current_user,
)
from igreja_api.schemas.common import ApiResponse, MessageResponse
from igreja_api.schemas.usuario import LoginRequest, LoginResponse, UsuarioMe, VerifyResponse
from igreja_api.services import auth_service
from igreja_api.services.audit_service import Ator
from igreja_api.services.auth_service import AutenticacaoError

router = APIRouter(prefix="/api/auth", tags=["Autenticação"])


@router.post("/login", response_model=ApiResponse[LoginResponse], summary="Login")
def login(data: LoginRequest, db: Session = Depends(get_db), ator: Ator = Depends(get_ator_anonimo)):
    """
    Autentica por email e senha e retorna o token JWT (validade de 24h).
    Após 5 tentativas falhadas a conta fica bloqueada por 30 minutos.
    """
    try:
        resultado = auth_service.autenticar(db, data.email, data.senha, ator)
    except AutenticacaoError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return ApiResponse(data=resultado, message="Login realizado com sucesso")


@router.get("/me", response_model=ApiResponse[UsuarioMe], summary="Usuário autenticado")
def me(atual: UsuarioAutenticado = Depends(get_current_user), db: Session = Depends(get_db)):
    return ApiResponse(data=auth_service.montar_usuario_me(db, atual.usuario, atual.permissoes))


@router.get("/verify", response_model=ApiResponse[VerifyResponse], summary="Verificar token")
def verify(atual: UsuarioAutenticado = Depends(get_current_user), db: Session = Depends(get_db)):
    usuario = auth_service.montar_usuario_me(db, atual.usuario, atual.permissoes)
    return ApiResponse(data=VerifyResponse(valid=True, usuario=usuario))


@router.post("/logout", response_model=MessageResponse, summary="Logout")
def logout(
    atual: UsuarioAutenticado = Depends(get_current_user),
    ator: Ator = Depends(get_ator),
    db: Session = Depends(get_db),
):
    """O token não é invalidado no servidor : o cliente deve descartá-lo."""
    auth_service.registrar_logout(db, atual.id, ator)
    return MessageResponse(message="Logout realizado com sucesso")
