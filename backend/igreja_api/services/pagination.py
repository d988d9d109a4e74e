"""
Paginação genérica de consultas SELECT (page 1-based + limit).
"""

import math

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from igreja_api.schemas.common import PaginationInfo


def paginate(db: Session, stmt, page: int, limit: int) -> tuple[list, PaginationInfo]:
    """
    Executa `stmt` com LIMIT/OFFSET e retorna (itens, PaginationInfo).
    O total é calculado sobre a mesma consulta, sem ORDER BY.
    """
    total = db.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar() or 0

    items = db.execute(
        stmt.limit(limit).offset((page - 1) * limit)
    ).scalars().all()

    pages = math.ceil(total / limit) if limit else 0
    return list(items), PaginationInfo(page=page, limit=limit, total=total, pages=pages)
