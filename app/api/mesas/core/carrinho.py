from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterator, List, Optional

from app.api.catalogo.contracts.produto_contract import IProdutoContract, Produto
from app.api.mesas.core import pricing
from app.api.mesas.core.exceptions import InvalidQuantityError, ProductNotFoundError


@dataclass
class ItemCarrinho:
    """Linha do carrinho. O subtotal é sempre derivado do produto e da quantidade/peso."""
    produto: Produto
    quantidade: int = 1
    peso_gramas: Optional[Decimal] = None
    observacao: Optional[str] = None

    @property
    def produto_codigo(self) -> str:
        return self.produto.codigo

    @property
    def produto_nome(self) -> str:
        return self.produto.nome

    @property
    def pesavel(self) -> bool:
        return self.produto.pesavel

    @property
    def preco_unitario(self) -> Optional[Decimal]:
        return self.produto.preco_unitario

    @property
    def preco_por_grama(self) -> Optional[Decimal]:
        return self.produto.preco_por_grama

    @property
    def subtotal(self) -> Decimal:
        return pricing.line_subtotal(self.produto, self.quantidade, self.peso_gramas)


@dataclass
class Carrinho:
    """Carrinho em composição para uma mesa, indexado por código de produto.

    A ordem de iteração é a ordem de inserção. Re-adicionar um produto soma a
    quantidade (ou o peso, para pesáveis) no item existente.
    """
    catalogo: Optional[IProdutoContract] = None
    mesa_id: Optional[int] = None
    _itens: Dict[str, ItemCarrinho] = field(default_factory=dict, init=False, repr=False)

    # -------- Leitura --------
    @property
    def itens(self) -> List[ItemCarrinho]:
        return list(self._itens.values())

    @property
    def is_empty(self) -> bool:
        return not self._itens

    @property
    def subtotal(self) -> Decimal:
        return pricing.cart_subtotal(self._itens.values())

    def total(self, desconto=pricing.ZERO) -> Decimal:
        return pricing.cart_total(self.subtotal, desconto)

    def get(self, produto_codigo: str) -> Optional[ItemCarrinho]:
        return self._itens.get(produto_codigo)

    def __len__(self) -> int:
        return len(self._itens)

    def __iter__(self) -> Iterator[ItemCarrinho]:
        return iter(list(self._itens.values()))

    def __contains__(self, produto_codigo: object) -> bool:
        return produto_codigo in self._itens

    # -------- Escrita --------
    def add_item(
        self,
        produto: Produto,
        quantidade: int = 1,
        peso_gramas: Optional[Decimal] = None,
        observacao: Optional[str] = None,
    ) -> "Carrinho":
        if not produto.ativo:
            raise ProductNotFoundError(produto.codigo)
        if quantidade is None or int(quantidade) <= 0:
            raise InvalidQuantityError(
                "Quantidade deve ser maior que zero",
                produto_codigo=produto.codigo,
                quantidade=quantidade,
            )
        if peso_gramas is not None:
            peso_gramas = pricing.to_decimal(peso_gramas)
            if peso_gramas <= 0:
                raise InvalidQuantityError(
                    "Peso deve ser maior que zero",
                    produto_codigo=produto.codigo,
                    peso_gramas=str(peso_gramas),
                )

        existente = self._itens.get(produto.codigo)
        if existente is None:
            peso = peso_gramas if produto.pesavel else None
            # valida preços antes de mutar o carrinho
            pricing.line_subtotal(produto, int(quantidade), peso)
            self._itens[produto.codigo] = ItemCarrinho(
                produto=produto,
                quantidade=int(quantidade),
                peso_gramas=peso,
                observacao=observacao or None,
            )
            return self

        nova_quantidade = existente.quantidade
        novo_peso = existente.peso_gramas
        if produto.pesavel:
            if peso_gramas is not None:
                novo_peso = (existente.peso_gramas or pricing.ZERO) + peso_gramas
        else:
            nova_quantidade = existente.quantidade + int(quantidade)
        pricing.line_subtotal(produto, nova_quantidade, novo_peso)

        existente.produto = produto
        existente.quantidade = nova_quantidade
        existente.peso_gramas = novo_peso
        if not existente.observacao and observacao:
            existente.observacao = observacao
        return self

    def set_quantity(self, produto_codigo: str, quantidade: int) -> "Carrinho":
        if quantidade is None or int(quantidade) <= 0:
            return self.remove_item(produto_codigo)

        item = self._itens.get(produto_codigo)
        if item is None:
            return self

        # preço atual do catálogo; o capturado no add pode estar defasado
        produto = self.catalogo.lookup(produto_codigo) if self.catalogo is not None else item.produto
        pricing.line_subtotal(produto, int(quantidade), item.peso_gramas)
        item.produto = produto
        item.quantidade = int(quantidade)
        return self

    def remove_item(self, produto_codigo: str) -> "Carrinho":
        self._itens.pop(produto_codigo, None)
        return self

    def clear(self) -> "Carrinho":
        self._itens.clear()
        return self
