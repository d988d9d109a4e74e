"""
Router das funções de escala (Louvor, Recepção, Som...).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import get_ator, get_current_user, require_permissions, traduzir_erro
from igreja_api.schemas.common import ApiResponse, MessageResponse
from igreja_api.schemas.referencia import FuncaoCreate, FuncaoResponse, FuncaoUpdate
from igreja_api.services import referencia_service
from igreja_api.services.audit_service import Ator

router = APIRouter(prefix="/api/funcoes", tags=["Funções"], dependencies=[Depends(get_current_user)])

gerenciar = Depends(require_permissions("manage_escalas"))


@router.get("", response_model=ApiResponse[List[FuncaoResponse]])
def list_funcoes(ativo: Optional[bool] = None, db: Session = Depends(get_db)):
    return ApiResponse(data=referencia_service.list_funcoes(db, ativo))


@router.get("/{funcao_id}", response_model=ApiResponse[FuncaoResponse])
def get_funcao(funcao_id: int, db: Session = Depends(get_db)):
    funcao = referencia_service.get_funcao(db, funcao_id)
    if funcao is None:
        raise HTTPException(status_code=404, detail="Função não encontrada")
    return ApiResponse(data=funcao)


@router.post("", response_model=ApiResponse[FuncaoResponse], status_code=201, dependencies=[gerenciar])
def create_funcao(data: FuncaoCreate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        funcao = referencia_service.create_funcao(db, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=funcao, message="Função criada com sucesso")


@router.put("/{funcao_id}", response_model=ApiResponse[FuncaoResponse], dependencies=[gerenciar])
def update_funcao(
    funcao_id: int, data: FuncaoUpdate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)
):
    try:
        funcao = referencia_service.update_funcao(db, funcao_id, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if funcao is None:
        raise HTTPException(status_code=404, detail="Função não encontrada")
    return ApiResponse(data=funcao, message="Função atualizada com sucesso")


@router.delete("/{funcao_id}", response_model=MessageResponse, dependencies=[gerenciar])
def delete_funcao(funcao_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    """Recusada enquanto houver escalas ativas com esta função."""
    try:
        success = referencia_service.delete_funcao(db, funcao_id, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if not success:
        raise HTTPException(status_code=404, detail="Função não encontrada")
    return MessageResponse(message="Função excluída com sucesso")
