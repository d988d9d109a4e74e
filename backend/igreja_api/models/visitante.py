"""
Modelo SQLAlchemy para os visitantes (primeira visita à igreja).
"""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text, func

from igreja_api.database import Base


class Visitante(Base):
    __tablename__ = "visitantes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome_completo = Column(String(255), nullable=False)
    whatsapp = Column(String(20), nullable=True)
    data_nascimento = Column(Date, nullable=True)
    eh_cristao = Column(Boolean, default=False, nullable=False)
    mora_perto = Column(Boolean, default=False, nullable=False)
    igreja_origem = Column(String(255), nullable=True)
    forma_conhecimento_id = Column(Integer, ForeignKey("formas_conhecimento.id"), nullable=True)
    observacoes = Column(Text, nullable=True)
    avisos_organizador = Column(Text, nullable=True)
    data_visita = Column(Date, nullable=False)
    culto_id = Column(Integer, ForeignKey("cultos.id", ondelete="SET NULL"), nullable=True)
    cadastrado_por = Column(Integer, ForeignKey("usuarios.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True)
