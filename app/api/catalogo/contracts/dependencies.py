from fastapi import Depends
from sqlalchemy.orm import Session

from app.database.db_connection import get_db

from app.api.catalogo.contracts.produto_contract import IProdutoContract
from app.api.catalogo.adapters.produto_adapter import ProdutoAdapter


def get_produto_contract(db: Session = Depends(get_db)) -> IProdutoContract:
    return ProdutoAdapter(db)
