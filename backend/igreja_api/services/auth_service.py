"""
Serviço de autenticação : login com bloqueio após tentativas falhadas,
resolução das permissões do usuário e montagem do perfil "me".
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from igreja_api.config import settings
from igreja_api.models.pessoa import Pessoa
from igreja_api.models.usuario import Perfil, PerfilPermissao, Permissao, Usuario
from igreja_api.schemas.perfil import PerfilResumo
from igreja_api.schemas.usuario import LoginResponse, UsuarioMe, UsuarioResponse
from igreja_api.security import create_access_token, verify_password
from igreja_api.services import audit_service
from igreja_api.services.access_control import ResolvedPermissions
from igreja_api.services.audit_service import Ator

logger = logging.getLogger(__name__)

MSG_BLOQUEADO = "Usuário temporariamente bloqueado devido a tentativas de login falhadas"


class AutenticacaoError(ValueError):
    """Falha de autenticação : traduzida em 401 pelo router."""


def esta_bloqueado(usuario: Usuario, agora: Optional[datetime] = None) -> bool:
    agora = agora or datetime.now()
    return usuario.bloqueado_ate is not None and usuario.bloqueado_ate > agora


def perfil_valido(perfil: Optional[Perfil]) -> bool:
    return perfil is not None and perfil.ativo and perfil.deleted_at is None


def resolver_permissoes(db: Session, perfil: Optional[Perfil]) -> ResolvedPermissions:
    """Códigos das permissões ativas do perfil (vazio se o perfil não é válido)."""
    if not perfil_valido(perfil):
        return ResolvedPermissions()

    codigos = db.execute(
        select(Permissao.codigo)
        .join(PerfilPermissao, PerfilPermissao.permissao_id == Permissao.id)
        .where(
            PerfilPermissao.perfil_id == perfil.id,
            Permissao.ativo.is_(True),
        )
    ).scalars().all()
    return ResolvedPermissions.of(codigos)


def autenticar(db: Session, email: str, senha: str, ator: Optional[Ator] = None) -> LoginResponse:
    """
    Valida as credenciais e emite o token JWT.

    - email comparado em minúsculas;
    - MAX_LOGIN_ATTEMPTS falhas seguidas bloqueiam a conta por LOCKOUT_MINUTES;
    - sucesso zera o contador e atualiza ultimo_login.
    """
    email = email.strip().lower()
    usuario = db.execute(
        select(Usuario).where(
            func.lower(Usuario.email) == email,
            Usuario.deleted_at.is_(None),
        )
    ).scalar()

    if usuario is None:
        logger.warning("Tentativa de login com email desconhecido : %s", email)
        raise AutenticacaoError("Credenciais inválidas")

    agora = datetime.now()
    if esta_bloqueado(usuario, agora):
        raise AutenticacaoError(MSG_BLOQUEADO)

    if not usuario.ativo:
        raise AutenticacaoError("Usuário inativo")

    if not verify_password(senha, usuario.senha_hash):
        usuario.tentativas_login = (usuario.tentativas_login or 0) + 1
        if usuario.tentativas_login >= settings.MAX_LOGIN_ATTEMPTS:
            usuario.bloqueado_ate = agora + timedelta(minutes=settings.LOCKOUT_MINUTES)
            usuario.tentativas_login = 0
            logger.warning("Usuário %s bloqueado até %s", usuario.id, usuario.bloqueado_ate)
        db.commit()
        raise AutenticacaoError("Credenciais inválidas")

    usuario.tentativas_login = 0
    usuario.bloqueado_ate = None
    usuario.ultimo_login = agora
    db.commit()

    audit_service.record(
        db, _com_usuario(ator, usuario.id), "usuarios", "LOGIN", usuario.id,
        dados_novos={"ultimo_login": agora.isoformat()},
    )
    logger.info("Login bem-sucedido : usuário %s", usuario.id)

    return LoginResponse(
        token=create_access_token(usuario.id),
        usuario=montar_usuario_me(db, usuario),
    )


def registrar_logout(db: Session, usuario_id: int, ator: Optional[Ator] = None) -> None:
    """O token é stateless : o logout apenas fica registrado na auditoria."""
    audit_service.record(db, ator, "usuarios", "LOGOUT", usuario_id)
    logger.info("Logout : usuário %s", usuario_id)


def montar_usuario_response(db: Session, usuario: Usuario) -> UsuarioResponse:
    perfil = db.get(Perfil, usuario.perfil_id)
    pessoa = db.execute(
        select(Pessoa).where(Pessoa.usuario_id == usuario.id, Pessoa.deleted_at.is_(None))
    ).scalar()

    return UsuarioResponse(
        id=usuario.id,
        email=usuario.email,
        perfil_id=usuario.perfil_id,
        perfil=PerfilResumo.model_validate(perfil) if perfil is not None else None,
        pessoa_id=pessoa.id if pessoa is not None else None,
        nome=pessoa.nome_completo if pessoa is not None else None,
        ativo=usuario.ativo,
        email_verificado=usuario.email_verificado,
        ultimo_login=usuario.ultimo_login,
        bloqueado_ate=usuario.bloqueado_ate,
        created_at=usuario.created_at,
    )


def montar_usuario_me(
    db: Session, usuario: Usuario, permissoes: Optional[ResolvedPermissions] = None
) -> UsuarioMe:
    base = montar_usuario_response(db, usuario)
    if permissoes is None:
        permissoes = resolver_permissoes(db, db.get(Perfil, usuario.perfil_id))
    return UsuarioMe(**base.model_dump(), permissoes=permissoes.sorted())


def _com_usuario(ator: Optional[Ator], usuario_id: int) -> Ator:
    ator = ator or Ator()
    return Ator(usuario_id=usuario_id, ip=ator.ip, user_agent=ator.user_agent)
