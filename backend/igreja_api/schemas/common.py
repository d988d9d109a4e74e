"""
Envelope de resposta comum a todos os endpoints : {success, data, message, pagination}.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginationInfo(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    pagination: Optional[PaginationInfo] = None


class MessageResponse(BaseModel):
    """Resposta sem dados (exclusões, logout...)."""
    success: bool = True
    message: str
