"""
Testes unitários da paginação genérica.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from igreja_api.models.pessoa import Pessoa
from igreja_api.services.pagination import paginate


def make_db_mock(total, itens):
    db = MagicMock()
    db.execute.return_value.scalar.return_value = total
    db.execute.return_value.scalars.return_value.all.return_value = itens
    return db


@pytest.mark.parametrize("total,limit,pages", [
    (0, 10, 0),
    (1, 10, 1),
    (10, 10, 1),
    (11, 10, 2),
    (95, 20, 5),
])
def test_numero_de_paginas(total, limit, pages):
    _, info = paginate(make_db_mock(total, []), select(Pessoa), 1, limit)
    assert info.pages == pages
    assert info.total == total


def test_offset_da_pagina():
    db = make_db_mock(30, ["a", "b"])

    itens, info = paginate(db, select(Pessoa).order_by(Pessoa.nome_completo), 3, 10)

    assert itens == ["a", "b"]
    assert info.page == 3
    stmt = db.execute.call_args_list[1].args[0]
    assert stmt._limit == 10
    assert stmt._offset == 20


def test_total_none_vira_zero():
    _, info = paginate(make_db_mock(None, []), select(Pessoa), 1, 10)
    assert info.total == 0
