"""
Modelo SQLAlchemy para o log de auditoria (somente inserção).
"""

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB

from igreja_api.database import Base


class LogAuditoria(Base):
    __tablename__ = "logs_auditoria"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey("usuarios.id", ondelete="SET NULL"), nullable=True)
    tabela = Column(String(100), nullable=False)
    operacao = Column(String(20), nullable=False)  # CREATE, UPDATE, DELETE, LOGIN, LOGOUT
    registro_id = Column(Integer, nullable=True)
    dados_anteriores = Column(JSONB, nullable=True)
    dados_novos = Column(JSONB, nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
