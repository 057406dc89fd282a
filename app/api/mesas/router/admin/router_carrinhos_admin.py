from decimal import Decimal

from fastapi import APIRouter, Depends, Path, Query, status

from app.api.catalogo.contracts.dependencies import get_produto_contract
from app.api.catalogo.contracts.produto_contract import IProdutoContract
from app.api.mesas.core.exceptions import TableUpdateError
from app.api.mesas.schemas.schema_carrinho import (
    CarrinhoCreate,
    CarrinhoOut,
    AdicionarItemCarrinhoRequest,
    AtualizarQuantidadeRequest,
)
from app.api.mesas.schemas.schema_venda_mesa import VendaMetaIn, VendaOut
from app.api.mesas.services.service_carrinhos import CarrinhoRegistry
from app.api.mesas.services.service_commit_pedido import CommitPedidoService
from app.api.mesas.services.service_mesas import MesaService
from app.api.mesas.services.dependencies import (
    get_carrinho_registry,
    get_commit_pedido_service,
    get_mesa_service,
)
from app.utils.logger import logger

router = APIRouter(
    prefix="/api/mesas/admin/carrinhos",
    tags=["Admin - Mesas - Carrinhos"],
)


@router.post("", response_model=CarrinhoOut, status_code=status.HTTP_201_CREATED)
def criar_carrinho(
    body: CarrinhoCreate,
    registry: CarrinhoRegistry = Depends(get_carrinho_registry),
    mesa_svc: MesaService = Depends(get_mesa_service),
    catalogo: IProdutoContract = Depends(get_produto_contract),
):
    """Abre um carrinho vazio para montar o pedido de uma mesa."""
    mesa_svc.obter_mesa(body.mesa_id)
    carrinho_id = registry.criar(mesa_id=body.mesa_id, catalogo=catalogo)
    return CarrinhoOut.from_carrinho(carrinho_id, registry.obter(carrinho_id))


@router.get("/{carrinho_id}", response_model=CarrinhoOut)
def obter_carrinho(
    carrinho_id: str = Path(...),
    desconto: Decimal = Query(Decimal("0"), ge=0, description="Desconto para simular o total"),
    registry: CarrinhoRegistry = Depends(get_carrinho_registry),
):
    return CarrinhoOut.from_carrinho(carrinho_id, registry.obter(carrinho_id), desconto)


@router.post("/{carrinho_id}/itens", response_model=CarrinhoOut)
def adicionar_item(
    body: AdicionarItemCarrinhoRequest,
    carrinho_id: str = Path(...),
    registry: CarrinhoRegistry = Depends(get_carrinho_registry),
    catalogo: IProdutoContract = Depends(get_produto_contract),
):
    """
    Adiciona um produto ao carrinho.

    Produto já presente tem a quantidade somada (ou o peso, se for pesável).
    """
    carrinho = registry.obter(carrinho_id, catalogo=catalogo)
    produto = catalogo.lookup(body.produto_codigo)
    carrinho.add_item(
        produto,
        quantidade=body.quantidade,
        peso_gramas=body.peso_gramas,
        observacao=body.observacao,
    )
    logger.info(f"[Carrinho] {carrinho_id}: +{body.quantidade} {produto.codigo}")
    return CarrinhoOut.from_carrinho(carrinho_id, carrinho)


@router.put("/{carrinho_id}/itens/{produto_codigo}", response_model=CarrinhoOut)
def atualizar_quantidade(
    body: AtualizarQuantidadeRequest,
    carrinho_id: str = Path(...),
    produto_codigo: str = Path(...),
    registry: CarrinhoRegistry = Depends(get_carrinho_registry),
    catalogo: IProdutoContract = Depends(get_produto_contract),
):
    """Define a quantidade do item; zero ou negativo remove o item."""
    carrinho = registry.obter(carrinho_id, catalogo=catalogo)
    carrinho.set_quantity(produto_codigo, body.quantidade)
    return CarrinhoOut.from_carrinho(carrinho_id, carrinho)


@router.delete("/{carrinho_id}/itens/{produto_codigo}", response_model=CarrinhoOut)
def remover_item(
    carrinho_id: str = Path(...),
    produto_codigo: str = Path(...),
    registry: CarrinhoRegistry = Depends(get_carrinho_registry),
):
    carrinho = registry.obter(carrinho_id)
    carrinho.remove_item(produto_codigo)
    return CarrinhoOut.from_carrinho(carrinho_id, carrinho)


@router.delete("/{carrinho_id}", status_code=status.HTTP_204_NO_CONTENT)
def descartar_carrinho(
    carrinho_id: str = Path(...),
    registry: CarrinhoRegistry = Depends(get_carrinho_registry),
):
    """Cancela o pedido em composição; nada é gravado."""
    registry.descartar(carrinho_id)


@router.post("/{carrinho_id}/confirmar", response_model=VendaOut, status_code=status.HTTP_201_CREATED)
def confirmar_pedido(
    body: VendaMetaIn,
    carrinho_id: str = Path(...),
    registry: CarrinhoRegistry = Depends(get_carrinho_registry),
    svc: CommitPedidoService = Depends(get_commit_pedido_service),
):
    """
    Grava a venda com os itens do carrinho e ocupa a mesa.

    - Mesa precisa estar ativa e livre; carrinho não pode estar vazio.
    - Se os itens não puderem ser gravados, a venda é desfeita (500).
    - Se só a mesa falhar, a venda permanece e a resposta (500) traz
      `venda_id` para uso em `POST /api/mesas/admin/mesas/{mesa_id}/finalizar`.
      O carrinho é descartado nesse caso, pois os itens já estão na venda.
    """
    carrinho = registry.obter(carrinho_id)
    try:
        venda = svc.commit_order(carrinho.mesa_id, carrinho, body)
    except TableUpdateError:
        registry.descartar(carrinho_id)
        raise
    registry.descartar(carrinho_id)
    return venda
