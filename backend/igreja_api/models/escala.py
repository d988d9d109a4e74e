"""
Modelo SQLAlchemy para as escalas (pessoa ↔ função ↔ culto).
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, func, text

from igreja_api.database import Base


class Escala(Base):
    __tablename__ = "escalas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pessoa_id = Column(Integer, ForeignKey("pessoas.id"), nullable=False)
    funcao_id = Column(Integer, ForeignKey("funcoes.id"), nullable=False)
    culto_id = Column(Integer, ForeignKey("cultos.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), default="pendente", nullable=False)  # pendente, confirmada, presente, ausente, cancelada
    observacoes = Column(Text, nullable=True)
    confirmado_em = Column(DateTime, nullable=True)
    check_in_em = Column(DateTime, nullable=True)
    created_by = Column(Integer, ForeignKey("usuarios.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True)

    # Uma única escala não cancelada por (pessoa, culto, função)
    __table_args__ = (
        Index(
            "uq_escalas_pessoa_culto_funcao",
            "pessoa_id", "culto_id", "funcao_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL AND status <> 'cancelada'"),
        ),
    )
