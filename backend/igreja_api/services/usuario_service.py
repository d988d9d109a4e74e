"""
Serviço de usuários : cadastro, senha, ativação e exclusão lógica.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from igreja_api.models.pessoa import Pessoa
from igreja_api.models.usuario import Perfil, Usuario
from igreja_api.schemas.common import PaginationInfo
from igreja_api.schemas.usuario import (
    SenhaUpdate,
    UsuarioCreate,
    UsuarioEstatisticas,
    UsuarioResponse,
    UsuarioUpdate,
)
from igreja_api.security import hash_password, verify_password
from igreja_api.services import audit_service
from igreja_api.services.audit_service import Ator
from igreja_api.services.auth_service import montar_usuario_response
from igreja_api.services.pagination import paginate

logger = logging.getLogger(__name__)

CAMPOS_OBRIGATORIOS = {"email", "perfil_id", "ativo", "email_verificado"}


def list_usuarios(
    db: Session,
    page: int,
    limit: int,
    busca: Optional[str] = None,
    perfil_id: Optional[int] = None,
    ativo: Optional[bool] = None,
) -> tuple[list[UsuarioResponse], PaginationInfo]:
    stmt = select(Usuario).where(Usuario.deleted_at.is_(None))
    if busca:
        pessoas_ids = select(Pessoa.usuario_id).where(Pessoa.nome_completo.ilike(f"%{busca}%"))
        stmt = stmt.where(or_(Usuario.email.ilike(f"%{busca}%"), Usuario.id.in_(pessoas_ids)))
    if perfil_id is not None:
        stmt = stmt.where(Usuario.perfil_id == perfil_id)
    if ativo is not None:
        stmt = stmt.where(Usuario.ativo.is_(ativo))

    usuarios, pagination = paginate(db, stmt.order_by(Usuario.email), page, limit)
    return [montar_usuario_response(db, u) for u in usuarios], pagination


def get_usuario(db: Session, usuario_id: int) -> Optional[UsuarioResponse]:
    usuario = _get(db, usuario_id)
    if usuario is None:
        return None
    return montar_usuario_response(db, usuario)


def create_usuario(db: Session, data: UsuarioCreate, ator: Optional[Ator] = None) -> UsuarioResponse:
    """
    Cria um usuário.

    Validações :
    1. Email único (entre usuários não excluídos)
    2. Perfil existente e ativo
    3. Pessoa (opcional) existente e ainda sem usuário vinculado
    """
    _verificar_email_unico(db, data.email)
    _verificar_perfil(db, data.perfil_id)
    pessoa = _verificar_pessoa(db, data.pessoa_id) if data.pessoa_id is not None else None

    usuario = Usuario(
        email=data.email,
        senha_hash=hash_password(data.senha),
        perfil_id=data.perfil_id,
        ativo=data.ativo,
    )
    db.add(usuario)
    db.flush()

    if pessoa is not None:
        pessoa.usuario_id = usuario.id

    _commit(db)
    db.refresh(usuario)

    audit_service.record(db, ator, "usuarios", "CREATE", usuario.id, dados_novos=audit_service.snapshot(usuario))
    logger.info("Usuário criado : %s (%s)", usuario.email, usuario.id)
    return montar_usuario_response(db, usuario)


def update_usuario(
    db: Session, usuario_id: int, data: UsuarioUpdate, ator: Optional[Ator] = None
) -> Optional[UsuarioResponse]:
    usuario = _get(db, usuario_id)
    if usuario is None:
        return None

    if data.ativo is False and ator is not None and ator.usuario_id == usuario.id:
        raise ValueError("Você não pode desativar sua própria conta.")
    if data.email is not None and data.email != usuario.email:
        _verificar_email_unico(db, data.email, exclude_id=usuario.id)
    if data.perfil_id is not None and data.perfil_id != usuario.perfil_id:
        _verificar_perfil(db, data.perfil_id)

    antes = audit_service.snapshot(usuario)
    for field, value in data.model_dump(exclude_unset=True, exclude={"pessoa_id"}).items():
        if value is None and field in CAMPOS_OBRIGATORIOS:
            continue
        setattr(usuario, field, value)

    if "pessoa_id" in data.model_fields_set:
        _vincular_pessoa(db, usuario, data.pessoa_id)

    _commit(db)
    db.refresh(usuario)

    audit_service.record(db, ator, "usuarios", "UPDATE", usuario.id, antes, audit_service.snapshot(usuario))
    return montar_usuario_response(db, usuario)


def alterar_senha(db: Session, usuario_id: int, data: SenhaUpdate, ator: Optional[Ator] = None) -> None:
    """Troca de senha pelo próprio usuário : a senha atual deve conferir."""
    usuario = _get(db, usuario_id)
    if usuario is None:
        raise ValueError("Usuário não encontrado")
    if not verify_password(data.senha_atual, usuario.senha_hash):
        raise ValueError("Senha atual incorreta")

    usuario.senha_hash = hash_password(data.nova_senha)
    db.commit()
    audit_service.record(db, ator, "usuarios", "UPDATE", usuario.id, dados_novos={"senha": "alterada"})
    logger.info("Senha alterada : usuário %s", usuario.id)


def resetar_senha(db: Session, usuario_id: int, nova_senha: str, ator: Optional[Ator] = None) -> None:
    """Redefinição administrativa : também desbloqueia a conta."""
    usuario = _get(db, usuario_id)
    if usuario is None:
        raise ValueError("Usuário não encontrado")

    usuario.senha_hash = hash_password(nova_senha)
    usuario.tentativas_login = 0
    usuario.bloqueado_ate = None
    db.commit()
    audit_service.record(db, ator, "usuarios", "UPDATE", usuario.id, dados_novos={"senha": "redefinida"})
    logger.info("Senha redefinida : usuário %s", usuario.id)


def toggle_ativo(db: Session, usuario_id: int, ator: Optional[Ator] = None) -> Optional[UsuarioResponse]:
    usuario = _get(db, usuario_id)
    if usuario is None:
        return None
    if ator is not None and ator.usuario_id == usuario.id:
        raise ValueError("Você não pode desativar sua própria conta.")

    usuario.ativo = not usuario.ativo
    db.commit()
    db.refresh(usuario)

    audit_service.record(db, ator, "usuarios", "UPDATE", usuario.id, {"ativo": not usuario.ativo}, {"ativo": usuario.ativo})
    return montar_usuario_response(db, usuario)


def delete_usuario(db: Session, usuario_id: int, ator: Optional[Ator] = None) -> bool:
    """Exclusão lógica. Retorna False se o usuário não existe."""
    usuario = _get(db, usuario_id)
    if usuario is None:
        return False
    if ator is not None and ator.usuario_id == usuario.id:
        raise ValueError("Você não pode excluir sua própria conta.")

    antes = audit_service.snapshot(usuario)
    usuario.deleted_at = datetime.now()
    usuario.ativo = False
    db.commit()

    audit_service.record(db, ator, "usuarios", "DELETE", usuario.id, dados_anteriores=antes)
    logger.info("Usuário excluído : %s", usuario.id)
    return True


def get_estatisticas(db: Session) -> UsuarioEstatisticas:
    base = select(func.count()).select_from(Usuario).where(Usuario.deleted_at.is_(None))
    total = db.execute(base).scalar() or 0
    ativos = db.execute(base.where(Usuario.ativo.is_(True))).scalar() or 0
    bloqueados = db.execute(base.where(Usuario.bloqueado_ate > datetime.now())).scalar() or 0
    nunca_logaram = db.execute(base.where(Usuario.ultimo_login.is_(None))).scalar() or 0

    return UsuarioEstatisticas(
        total=total,
        ativos=ativos,
        inativos=total - ativos,
        bloqueados=bloqueados,
        nunca_logaram=nunca_logaram,
    )


def _get(db: Session, usuario_id: int) -> Optional[Usuario]:
    usuario = db.get(Usuario, usuario_id)
    if usuario is None or usuario.deleted_at is not None:
        return None
    return usuario


def _verificar_email_unico(db: Session, email: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(Usuario.id).where(func.lower(Usuario.email) == email.lower())
    if exclude_id is not None:
        stmt = stmt.where(Usuario.id != exclude_id)
    if db.execute(stmt).scalar() is not None:
        raise ValueError("Já existe um usuário com este email.")


def _verificar_perfil(db: Session, perfil_id: int) -> None:
    perfil = db.get(Perfil, perfil_id)
    if perfil is None or perfil.deleted_at is not None or not perfil.ativo:
        raise ValueError("Perfil não encontrado ou inativo")


def _verificar_pessoa(db: Session, pessoa_id: int) -> Pessoa:
    pessoa = db.get(Pessoa, pessoa_id)
    if pessoa is None or pessoa.deleted_at is not None:
        raise ValueError("Pessoa não encontrada")
    if pessoa.usuario_id is not None:
        raise ValueError("Esta pessoa já possui um usuário vinculado.")
    return pessoa


def _vincular_pessoa(db: Session, usuario: Usuario, pessoa_id: Optional[int]) -> None:
    """Troca a pessoa vinculada ao usuário (pessoa_id=None desfaz o vínculo)."""
    atual = db.execute(select(Pessoa).where(Pessoa.usuario_id == usuario.id)).scalar()
    if atual is not None and atual.id == pessoa_id:
        return
    nova = _verificar_pessoa(db, pessoa_id) if pessoa_id is not None else None
    if atual is not None:
        atual.usuario_id = None
        db.flush()  # libera a unicidade de pessoas.usuario_id antes do novo vínculo
    if nova is not None:
        nova.usuario_id = usuario.id


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValueError("Email ou pessoa já vinculados a outro usuário.") from e
