"""
Decisão de acesso baseada em permissões (RBAC).

O conjunto de permissões do usuário é resolvido uma única vez por requisição
(ResolvedPermissions) e passado explicitamente para `decide`.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

ADMIN_SISTEMA = "admin_sistema"


@dataclass(frozen=True)
class ResolvedPermissions:
    """Conjunto imutável de códigos de permissão do usuário autenticado."""
    codigos: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, codigos: Iterable[str]) -> "ResolvedPermissions":
        return cls(frozenset(codigos))

    @property
    def is_admin(self) -> bool:
        return ADMIN_SISTEMA in self.codigos

    def __contains__(self, codigo: str) -> bool:
        return codigo in self.codigos

    def sorted(self) -> list[str]:
        return sorted(self.codigos)


def decide(required: Iterable[str], held: ResolvedPermissions) -> bool:
    """
    Retorna True se o acesso é permitido.

    - admin_sistema libera tudo;
    - caso contrário, basta UMA das permissões requeridas (OU lógico).
    """
    required = frozenset(required)
    if not required:
        raise ValueError("Ao menos uma permissão requerida deve ser informada.")
    if held.is_admin:
        return True
    return not required.isdisjoint(held.codigos)
