"""
Router dos cargos eclesiásticos (somente leitura).
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import get_current_user
from igreja_api.schemas.common import ApiResponse
from igreja_api.schemas.referencia import CargoResponse
from igreja_api.services import referencia_service

router = APIRouter(prefix="/api/cargos", tags=["Cargos"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=ApiResponse[List[CargoResponse]])
def list_cargos(db: Session = Depends(get_db)):
    """Cargos ativos, do nível hierárquico mais alto ao mais baixo."""
    return ApiResponse(data=referencia_service.list_cargos(db))


@router.get("/{cargo_id}", response_model=ApiResponse[CargoResponse])
def get_cargo(cargo_id: int, db: Session = Depends(get_db)):
    cargo = referencia_service.get_cargo(db, cargo_id)
    if cargo is None:
        raise HTTPException(status_code=404, detail="Cargo não encontrado")
    return ApiResponse(data=cargo)
