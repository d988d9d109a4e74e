"""
Modelos SQLAlchemy para as avaliações de culto e suas notas por critério.
"""

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, SmallInteger,
    String, Text, UniqueConstraint, func,
)

from igreja_api.database import Base


class CriterioAvaliacao(Base):
    __tablename__ = "criterios_avaliacao"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome = Column(String(100), unique=True, nullable=False)
    descricao = Column(Text, nullable=True)
    ordem_exibicao = Column(Integer, default=0, nullable=False)
    ativo = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Avaliacao(Base):
    __tablename__ = "avaliacoes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    culto_id = Column(Integer, ForeignKey("cultos.id", ondelete="SET NULL"), nullable=True)
    avaliador_id = Column(Integer, ForeignKey("usuarios.id"), nullable=True)  # NULL = anônimo
    nome_avaliador = Column(String(255), nullable=True)
    email_avaliador = Column(String(255), nullable=True)
    data_visita = Column(Date, nullable=False)
    comentario_geral = Column(Text, nullable=True)
    recomendaria = Column(Boolean, nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True)


class AvaliacaoCriterio(Base):
    """Nota (1 a 5) atribuída a um critério dentro de uma avaliação."""
    __tablename__ = "avaliacao_criterios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    avaliacao_id = Column(Integer, ForeignKey("avaliacoes.id", ondelete="CASCADE"), nullable=False)
    criterio_id = Column(Integer, ForeignKey("criterios_avaliacao.id"), nullable=False)
    nota = Column(SmallInteger, nullable=False)
    comentario = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("avaliacao_id", "criterio_id", name="uq_avaliacao_criterio"),
        CheckConstraint("nota BETWEEN 1 AND 5", name="ck_avaliacao_criterio_nota"),
    )
