"""
Dependências FastAPI compartilhadas pelos routers :
autenticação por Bearer token, verificação de permissões, contexto do
ator (auditoria), paginação e tradução de erros de serviço em HTTP.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from igreja_api.config import settings
from igreja_api.database import get_db
from igreja_api.models.usuario import Perfil, Usuario
from igreja_api.security import TokenExpiradoError, TokenInvalidoError, decode_access_token
from igreja_api.services.access_control import ResolvedPermissions, decide
from igreja_api.services.audit_service import Ator
from igreja_api.services.auth_service import (
    MSG_BLOQUEADO,
    esta_bloqueado,
    perfil_valido,
    resolver_permissoes,
)
from igreja_api.services.culto_service import ConflitoHorarioError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class UsuarioAutenticado:
    """Usuário da requisição com o perfil e as permissões já resolvidos."""
    usuario: Usuario
    perfil: Optional[Perfil]
    permissoes: ResolvedPermissions

    @property
    def id(self) -> int:
        return self.usuario.id


def _nao_autenticado(mensagem: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=mensagem,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> UsuarioAutenticado:
    """
    Valida o Bearer token e carrega o usuário.

    401 : token ausente, expirado ou inválido ; usuário inexistente,
    inativo, excluído ou bloqueado.
    """
    if credentials is None:
        raise _nao_autenticado("Token de acesso requerido")

    try:
        usuario_id = decode_access_token(credentials.credentials)
    except TokenExpiradoError:
        raise _nao_autenticado("Token expirado")
    except TokenInvalidoError:
        raise _nao_autenticado("Token inválido")

    usuario = db.get(Usuario, usuario_id)
    if usuario is None or not usuario.ativo or usuario.deleted_at is not None:
        raise _nao_autenticado("Usuário não encontrado ou inativo")
    if esta_bloqueado(usuario):
        raise _nao_autenticado(MSG_BLOQUEADO)

    perfil = db.get(Perfil, usuario.perfil_id) if usuario.perfil_id else None
    return UsuarioAutenticado(
        usuario=usuario,
        perfil=perfil,
        permissoes=resolver_permissoes(db, perfil),
    )


def require_permissions(*codigos: str):
    """
    Fábrica de dependência : exige ao menos UMA das permissões informadas
    (admin_sistema libera qualquer rota).

        @router.post(..., dependencies=[Depends(require_permissions("manage_cultos"))])
    """
    requeridas = frozenset(codigos)
    if not requeridas:
        raise ValueError("require_permissions exige ao menos um código de permissão.")

    def dependency(atual: UsuarioAutenticado = Depends(get_current_user)) -> UsuarioAutenticado:
        if not perfil_valido(atual.perfil):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Acesso negado: perfil de usuário não encontrado",
            )
        if not decide(requeridas, atual.permissoes):
            logger.warning(
                "Acesso negado ao usuário %s : requer %s, possui %s",
                atual.id, sorted(requeridas), atual.permissoes.sorted(),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "Acesso negado: permissões insuficientes",
                    "permissoes_requeridas": sorted(requeridas),
                    "permissoes_usuario": atual.permissoes.sorted(),
                },
            )
        return atual

    return dependency


def client_ip(request: Request) -> Optional[str]:
    """IP do cliente : primeiro valor de X-Forwarded-For ou o peer do socket."""
    encaminhado = request.headers.get("x-forwarded-for")
    if encaminhado:
        return encaminhado.split(",")[0].strip()
    return request.client.host if request.client else None


def get_ator(request: Request, atual: UsuarioAutenticado = Depends(get_current_user)) -> Ator:
    return Ator(
        usuario_id=atual.id,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


def get_ator_anonimo(request: Request) -> Ator:
    """Contexto das rotas públicas (sem usuário)."""
    return Ator(ip=client_ip(request), user_agent=request.headers.get("user-agent"))


@dataclass
class Paginacao:
    page: int
    limit: int


def get_paginacao(
    page: int = Query(1, ge=1, description="Página (começa em 1)"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> Paginacao:
    return Paginacao(page=page, limit=limit)


def traduzir_erro(e: ValueError) -> HTTPException:
    """
    Converte o ValueError de um serviço no HTTPException correspondente :
    conflito de horário → 409, "não encontrad..." → 404, demais → 400.
    """
    if isinstance(e, ConflitoHorarioError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": str(e), "conflito": e.conflito.model_dump(mode="json")},
        )
    msg = str(e)
    if "não encontrad" in msg.lower():
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=msg)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=msg)
