"""
Router das formas de conhecimento (como o visitante conheceu a igreja).
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import get_current_user
from igreja_api.schemas.common import ApiResponse
from igreja_api.schemas.referencia import FormaConhecimentoResponse
from igreja_api.services import referencia_service

router = APIRouter(
    prefix="/api/formas-conhecimento",
    tags=["Formas de conhecimento"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=ApiResponse[List[FormaConhecimentoResponse]])
def list_formas(db: Session = Depends(get_db)):
    return ApiResponse(data=referencia_service.list_formas_conhecimento(db))


@router.get("/{forma_id}", response_model=ApiResponse[FormaConhecimentoResponse])
def get_forma(forma_id: int, db: Session = Depends(get_db)):
    forma = referencia_service.get_forma_conhecimento(db, forma_id)
    if forma is None:
        raise HTTPException(status_code=404, detail="Forma de conhecimento não encontrada")
    return ApiResponse(data=forma)
