"""
Router de perfis de acesso e do catálogo de permissões.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import Paginacao, get_ator, get_paginacao, require_permissions, traduzir_erro
from igreja_api.schemas.common import ApiResponse, MessageResponse
from igreja_api.schemas.perfil import (
    PerfilCreate,
    PerfilEstatisticas,
    PerfilPermissoesUpdate,
    PerfilResponse,
    PerfilUpdate,
    PermissaoResponse,
)
from igreja_api.services import perfil_service
from igreja_api.services.audit_service import Ator

router = APIRouter(
    prefix="/api/perfis",
    tags=["Perfis"],
    dependencies=[Depends(require_permissions("manage_perfis"))],
)


@router.get("", response_model=ApiResponse[List[PerfilResponse]], summary="Listar perfis")
def list_perfis(
    busca: Optional[str] = None,
    ativo: Optional[bool] = None,
    paginacao: Paginacao = Depends(get_paginacao),
    db: Session = Depends(get_db),
):
    perfis, pagination = perfil_service.list_perfis(db, paginacao.page, paginacao.limit, busca, ativo)
    return ApiResponse(data=perfis, pagination=pagination)


@router.get("/todos", response_model=ApiResponse[List[PerfilResponse]], summary="Perfis ativos (sem paginação)")
def list_todos(db: Session = Depends(get_db)):
    return ApiResponse(data=perfil_service.list_todos(db))


@router.get(
    "/permissoes",
    response_model=ApiResponse[Dict[str, List[PermissaoResponse]]],
    summary="Permissões agrupadas por módulo",
)
def list_permissoes(db: Session = Depends(get_db)):
    return ApiResponse(data=perfil_service.list_permissoes_agrupadas(db))


@router.get("/estatisticas", response_model=ApiResponse[PerfilEstatisticas])
def get_estatisticas(db: Session = Depends(get_db)):
    return ApiResponse(data=perfil_service.get_estatisticas(db))


@router.get("/{perfil_id}", response_model=ApiResponse[PerfilResponse], summary="Detalhe de um perfil")
def get_perfil(perfil_id: int, db: Session = Depends(get_db)):
    perfil = perfil_service.get_perfil(db, perfil_id)
    if perfil is None:
        raise HTTPException(status_code=404, detail="Perfil não encontrado")
    return ApiResponse(data=perfil)


@router.post("", response_model=ApiResponse[PerfilResponse], status_code=201, summary="Criar perfil")
def create_perfil(data: PerfilCreate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        perfil = perfil_service.create_perfil(db, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=perfil, message="Perfil criado com sucesso")


@router.put("/{perfil_id}", response_model=ApiResponse[PerfilResponse], summary="Atualizar perfil")
def update_perfil(
    perfil_id: int, data: PerfilUpdate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)
):
    try:
        perfil = perfil_service.update_perfil(db, perfil_id, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if perfil is None:
        raise HTTPException(status_code=404, detail="Perfil não encontrado")
    return ApiResponse(data=perfil, message="Perfil atualizado com sucesso")


@router.put(
    "/{perfil_id}/permissoes",
    response_model=ApiResponse[PerfilResponse],
    summary="Substituir as permissões do perfil",
)
def set_permissoes(
    perfil_id: int,
    data: PerfilPermissoesUpdate,
    db: Session = Depends(get_db),
    ator: Ator = Depends(get_ator),
):
    """
    Substitui TODAS as permissões do perfil numa única transação.
    Um id de permissão inexistente rejeita a operação inteira (400).
    """
    try:
        perfil = perfil_service.set_profile_permissions(db, perfil_id, data.permissao_ids, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=perfil, message="Permissões atualizadas com sucesso")


@router.patch("/{perfil_id}/toggle-ativo", response_model=ApiResponse[PerfilResponse])
def toggle_ativo(perfil_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    perfil = perfil_service.toggle_ativo(db, perfil_id, ator)
    if perfil is None:
        raise HTTPException(status_code=404, detail="Perfil não encontrado")
    estado = "ativado" if perfil.ativo else "desativado"
    return ApiResponse(data=perfil, message=f"Perfil {estado} com sucesso")


@router.delete("/{perfil_id}", response_model=MessageResponse, summary="Excluir perfil")
def delete_perfil(perfil_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    """Exclusão lógica ; recusada (400) enquanto houver usuários com o perfil."""
    try:
        success = perfil_service.delete_perfil(db, perfil_id, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if not success:
        raise HTTPException(status_code=404, detail="Perfil não encontrado")
    return MessageResponse(message="Perfil excluído com sucesso")
