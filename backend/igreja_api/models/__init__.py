# Importa todos os modelos para registrar suas tabelas em Base.metadata
# antes que o SQLAlchemy tente resolver as chaves estrangeiras entre modelos.
# Sem este import, FKs como escalas.pessoa_id → pessoas.id falham com
# NoReferencedTableError se pessoa.py não tiver sido carregado antes.

from igreja_api.models.usuario import Permissao, Perfil, PerfilPermissao, Usuario  # noqa: F401
from igreja_api.models.referencia import (  # noqa: F401
    CargoEclesiastico, Departamento, FormaConhecimento, Funcao, TipoAtividade, TipoCulto,
)
from igreja_api.models.pessoa import Pessoa  # noqa: F401
from igreja_api.models.culto import Culto  # noqa: F401
from igreja_api.models.escala import Escala  # noqa: F401
from igreja_api.models.atividade import Atividade, AtividadeDepartamento, AtividadePessoa  # noqa: F401
from igreja_api.models.visitante import Visitante  # noqa: F401
from igreja_api.models.avaliacao import Avaliacao, AvaliacaoCriterio, CriterioAvaliacao  # noqa: F401
from igreja_api.models.auditoria import LogAuditoria  # noqa: F401
from igreja_api.models.configuracao import Configuracao  # noqa: F401
