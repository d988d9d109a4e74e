"""
Router de usuários do sistema (contas de acesso).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from igreja_api.database import get_db
from igreja_api.dependencies import (
    Paginacao,
    UsuarioAutenticado,
    get_ator,
    get_current_user,
    get_paginacao,
    require_permissions,
    traduzir_erro,
)
from igreja_api.schemas.common import ApiResponse, MessageResponse
from igreja_api.schemas.usuario import (
    SenhaReset,
    SenhaUpdate,
    UsuarioCreate,
    UsuarioEstatisticas,
    UsuarioResponse,
    UsuarioUpdate,
)
from igreja_api.services import usuario_service
from igreja_api.services.audit_service import Ator

router = APIRouter(prefix="/api/usuarios", tags=["Usuários"])

gerenciar = Depends(require_permissions("manage_usuarios"))


@router.get("", response_model=ApiResponse[List[UsuarioResponse]], dependencies=[gerenciar])
def list_usuarios(
    busca: Optional[str] = None,
    perfil_id: Optional[int] = None,
    ativo: Optional[bool] = None,
    paginacao: Paginacao = Depends(get_paginacao),
    db: Session = Depends(get_db),
):
    usuarios, pagination = usuario_service.list_usuarios(
        db, paginacao.page, paginacao.limit, busca=busca, perfil_id=perfil_id, ativo=ativo
    )
    return ApiResponse(data=usuarios, pagination=pagination)


@router.get("/estatisticas", response_model=ApiResponse[UsuarioEstatisticas], dependencies=[gerenciar])
def get_estatisticas(db: Session = Depends(get_db)):
    return ApiResponse(data=usuario_service.get_estatisticas(db))


@router.get("/{usuario_id}", response_model=ApiResponse[UsuarioResponse], dependencies=[gerenciar])
def get_usuario(usuario_id: int, db: Session = Depends(get_db)):
    usuario = usuario_service.get_usuario(db, usuario_id)
    if usuario is None:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    return ApiResponse(data=usuario)


@router.post("", response_model=ApiResponse[UsuarioResponse], status_code=201, dependencies=[gerenciar])
def create_usuario(data: UsuarioCreate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    """Cria uma conta ; o email deve ser único e o perfil deve existir."""
    try:
        usuario = usuario_service.create_usuario(db, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return ApiResponse(data=usuario, message="Usuário criado com sucesso")


@router.put("/{usuario_id}", response_model=ApiResponse[UsuarioResponse], dependencies=[gerenciar])
def update_usuario(
    usuario_id: int, data: UsuarioUpdate, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)
):
    try:
        usuario = usuario_service.update_usuario(db, usuario_id, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if usuario is None:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    return ApiResponse(data=usuario, message="Usuário atualizado com sucesso")


@router.put("/{usuario_id}/senha", response_model=MessageResponse)
def alterar_senha(
    usuario_id: int,
    data: SenhaUpdate,
    atual: UsuarioAutenticado = Depends(get_current_user),
    db: Session = Depends(get_db),
    ator: Ator = Depends(get_ator),
):
    """Troca da própria senha (a senha atual é exigida)."""
    if atual.id != usuario_id:
        raise HTTPException(status_code=403, detail="Você só pode alterar sua própria senha")
    try:
        usuario_service.alterar_senha(db, usuario_id, data, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return MessageResponse(message="Senha alterada com sucesso")


@router.put("/{usuario_id}/resetar-senha", response_model=MessageResponse, dependencies=[gerenciar])
def resetar_senha(
    usuario_id: int, data: SenhaReset, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)
):
    """Redefinição pelo administrador ; também desbloqueia a conta."""
    try:
        usuario_service.resetar_senha(db, usuario_id, data.nova_senha, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    return MessageResponse(message="Senha redefinida com sucesso")


@router.patch("/{usuario_id}/toggle-ativo", response_model=ApiResponse[UsuarioResponse], dependencies=[gerenciar])
def toggle_ativo(usuario_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        usuario = usuario_service.toggle_ativo(db, usuario_id, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if usuario is None:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    estado = "ativado" if usuario.ativo else "desativado"
    return ApiResponse(data=usuario, message=f"Usuário {estado} com sucesso")


@router.delete("/{usuario_id}", response_model=MessageResponse, dependencies=[gerenciar])
def delete_usuario(usuario_id: int, db: Session = Depends(get_db), ator: Ator = Depends(get_ator)):
    try:
        success = usuario_service.delete_usuario(db, usuario_id, ator)
    except ValueError as e:
        raise traduzir_erro(e)
    if not success:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    return MessageResponse(message="Usuário excluído com sucesso")
