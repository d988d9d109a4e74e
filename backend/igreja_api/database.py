"""
Conexão com o banco PostgreSQL via SQLAlchemy (sessões síncronas).
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from igreja_api.config import settings

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependência FastAPI: fornece uma sessão e a fecha após o uso."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
