from typing import List

from fastapi import APIRouter, Depends, Path, Query

from app.api.catalogo.contracts.dependencies import get_produto_contract
from app.api.catalogo.contracts.produto_contract import IProdutoContract, Produto
from app.utils.logger import logger

router = APIRouter(prefix="/api/catalogo/produtos", tags=["Catalogo - Produtos"])


@router.get(
  path="",
  response_model=List[Produto],
  summary="Lista produtos do catálogo",
  description="Produtos disponíveis para o pedido da mesa, ordenados pelo nome.",
)
def listar_produtos(
  apenas_ativos: bool = Query(True),
  catalogo: IProdutoContract = Depends(get_produto_contract),
):
  logger.info(f"[Produtos] Listar - apenas_ativos={apenas_ativos}")
  return catalogo.listar_produtos(apenas_ativos=apenas_ativos)


@router.get("/{codigo}", response_model=Produto)
def obter_produto(
  codigo: str = Path(..., min_length=1),
  catalogo: IProdutoContract = Depends(get_produto_contract),
):
  return catalogo.lookup(codigo)
