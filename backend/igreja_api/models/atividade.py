"""
Modelos SQLAlchemy para as atividades da programação de um culto
e suas associações com pessoas e departamentos.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, Time, func

from igreja_api.database import Base


class Atividade(Base):
    __tablename__ = "atividades"

    id = Column(Integer, primary_key=True, autoincrement=True)
    culto_id = Column(Integer, ForeignKey("cultos.id", ondelete="CASCADE"), nullable=False)
    titulo = Column(String(255), nullable=False)
    descricao = Column(Text, nullable=True)
    tipo_atividade_id = Column(Integer, ForeignKey("tipos_atividades.id"), nullable=True)
    ordem_programacao = Column(Integer, nullable=False, default=1)
    horario_inicio = Column(Time, nullable=True)
    duracao_estimada = Column(Integer, nullable=True)  # minutos
    observacoes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("usuarios.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True)


class AtividadePessoa(Base):
    """Associação atividade ↔ pessoas responsáveis."""
    __tablename__ = "atividade_pessoas"

    atividade_id = Column(Integer, ForeignKey("atividades.id", ondelete="CASCADE"), primary_key=True)
    pessoa_id = Column(Integer, ForeignKey("pessoas.id", ondelete="CASCADE"), primary_key=True)
    papel = Column(String(100), nullable=True)  # Ex: "Dirigente", "Pregador"
    confirmado = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class AtividadeDepartamento(Base):
    """Associação atividade ↔ departamentos envolvidos."""
    __tablename__ = "atividade_departamentos"

    atividade_id = Column(Integer, ForeignKey("atividades.id", ondelete="CASCADE"), primary_key=True)
    departamento_id = Column(Integer, ForeignKey("departamentos.id", ondelete="CASCADE"), primary_key=True)
    papel = Column(String(100), nullable=True)
    confirmado = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
