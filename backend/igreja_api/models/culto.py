"""
Modelo SQLAlchemy para os cultos.
"""

from sqlalchemy import (
    Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, Time, func, text,
)

from igreja_api.database import Base

STATUS_CULTO = ("planejado", "em_andamento", "finalizado", "cancelado")
STATUS_CULTO_ENCERRADOS = ("finalizado", "cancelado")


class Culto(Base):
    __tablename__ = "cultos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    titulo = Column(String(255), nullable=False)
    descricao = Column(Text, nullable=True)
    data_culto = Column(Date, nullable=False)
    horario_inicio = Column(Time, nullable=False)
    horario_fim = Column(Time, nullable=True)  # NULL = culto pontual (fim = início)
    local = Column(String(255), nullable=False, default="Templo Principal")
    tipo_culto_id = Column(Integer, ForeignKey("tipos_cultos.id"), nullable=False)
    status = Column(String(20), default="planejado", nullable=False)  # planejado, em_andamento, finalizado, cancelado
    observacoes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("usuarios.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True)

    # Mesmo início no mesmo local e data : rejeitado pelo banco.
    # A sobreposição parcial é verificada em culto_service.has_conflict.
    __table_args__ = (
        Index(
            "uq_cultos_local_horario",
            "data_culto", "local", "horario_inicio",
            unique=True,
            postgresql_where=text("deleted_at IS NULL AND status <> 'cancelado'"),
        ),
    )
