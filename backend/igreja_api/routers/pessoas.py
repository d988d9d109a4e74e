"""
Router de pessoas (membros e congregados).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import Paginacao, get_ator, get_paginacao, require_permissions, traduzir_erro
from igreja_api.schemas.common import ApiResponse, MessageResponse
from igreja_api.schemas.pessoa import PessoaCreate, PessoaEstatisticas, PessoaResponse, PessoaUpdate
from igreja_api.services import pessoa_service
from igreja_api.services.audit_service import Ator

router = APIRouter(prefix="/api/pessoas", tags=["Pessoas"])

leitura = Depends(require_permissions("read_pessoas", "manage_pessoas"))
gerenciar = Depends(require_permissions("manage_pessoas"))


@router.get("", response_model=ApiResponse[List[PessoaResponse]], dependencies=[leitura])
def list_pessoas(
    busca: Optional[str] = None,
    cargo_id: Optional[int] = None,
    departamento_id: Optional[int] = None,
    ativo: Optional[bool] = None,
    membro: Optional[bool] = None,
    paginacao: Paginacao = Depends(get_paginacao),
    db: Session = Depends(get_db),
):
    """Busca por nome, telefone ou email ; filtros por cargo, departamento e situação."""
    pessoas, pagination = pessoa_service.list_pessoas(
        db, paginacao.page, paginacao.limit,
        busca=busca, cargo_id=cargo_id, departamento_id=departamento_id, ativo=ativo, membro=membro,
    )
    return ApiResponse(data=pessoas, pagination=pagination)


@router.get("/estatisticas", response_model=ApiResponse[PessoaEstatisticas], dependencies=[leitura])
def get_estatisticas(db: Session = Depends(get_db)):
    return ApiResponse(data=pessoa_service.get_estatisticas(db))


@router.get("/{pessoa_id}", response_model=ApiResponse[PessoaResponse], dependencies=[leitura])
def get_pessoa(pessoa_id: int, db: Session = Depends(get_db)):
    pessoa = pessoa_service.get_pessoa(db, pessoa_id)
    if pessoa is None:
        raise HTTPException(status_code=404, detail="Pessoa não encontrada")
    return ApiResponse(data=pessoa)


@router.post("", response_model=ApiResponse[PessoaResponse], status_code=201, dependencies=[gerenciar])
def create_pessoa(data: PessoaCreate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        pessoa = pessoa_service.create_pessoa(db, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=pessoa, message="Pessoa cadastrada com sucesso")


@router.put("/{pessoa_id}", response_model=ApiResponse[PessoaResponse], dependencies=[gerenciar])
def update_pessoa(
    pessoa_id: int, data: PessoaUpdate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)
):
    try:
        pessoa = pessoa_service.update_pessoa(db, pessoa_id, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if pessoa is None:
        raise HTTPException(status_code=404, detail="Pessoa não encontrada")
    return ApiResponse(data=pessoa, message="Pessoa atualizada com sucesso")


@router.delete("/{pessoa_id}", response_model=MessageResponse, dependencies=[gerenciar])
def delete_pessoa(pessoa_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    """Exclusão lógica ; recusada enquanto houver um usuário vinculado à pessoa."""
    try:
        success = pessoa_service.delete_pessoa(db, pessoa_id, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if not success:
        raise HTTPException(status_code=404, detail="Pessoa não encontrada")
    return MessageResponse(message="Pessoa excluída com sucesso")
