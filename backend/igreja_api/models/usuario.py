"""
Modelos SQLAlchemy do controle de acesso : usuários, perfis e permissões.
"""

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, SmallInteger, String, Text, func,
)

from igreja_api.database import Base


class Permissao(Base):
    """Capacidade atômica (ex.: "manage_escalas"), agrupada por módulo."""
    __tablename__ = "permissoes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo = Column(String(100), unique=True, nullable=False)
    nome = Column(String(100), nullable=False)
    descricao = Column(Text, nullable=True)
    modulo = Column(String(50), nullable=False)  # cultos, escalas, pessoas, sistema...
    ativo = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Perfil(Base):
    __tablename__ = "perfis"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome = Column(String(50), unique=True, nullable=False)
    descricao = Column(Text, nullable=True)
    nivel_acesso = Column(SmallInteger, nullable=False, default=1)  # 1 a 10
    ativo = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True)


class PerfilPermissao(Base):
    """Associação perfil ↔ permissões."""
    __tablename__ = "perfil_permissoes"

    perfil_id = Column(Integer, ForeignKey("perfis.id", ondelete="CASCADE"), primary_key=True)
    permissao_id = Column(Integer, ForeignKey("permissoes.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, server_default=func.now())


class Usuario(Base):
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    senha_hash = Column(String(255), nullable=False)
    perfil_id = Column(Integer, ForeignKey("perfis.id"), nullable=False)
    ativo = Column(Boolean, default=True, nullable=False)
    email_verificado = Column(Boolean, default=False, nullable=False)
    tentativas_login = Column(Integer, default=0, nullable=False)
    bloqueado_ate = Column(DateTime, nullable=True)
    ultimo_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True)  # NULL = usuário ativo no sistema
