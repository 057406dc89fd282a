"""Cálculo de subtotais e totais de itens e carrinhos.

Funções puras, sem acesso a banco. Valores monetários são ``Decimal``
arredondados para centavos (ROUND_HALF_UP) uma única vez por linha; os
totais do carrinho somam linhas já arredondadas, na ordem de inserção.

O preço de produtos pesáveis é por grama: subtotal = peso_gramas x preco_por_grama.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Protocol, Union

from app.api.mesas.core.exceptions import PricingError

CENTAVOS = Decimal("0.01")
ZERO = Decimal("0.00")

Numero = Union[Decimal, int, float, str]


class ProdutoPrecificavel(Protocol):
    codigo: str
    pesavel: bool
    preco_unitario: Optional[Decimal]
    preco_por_grama: Optional[Decimal]


class LinhaComSubtotal(Protocol):
    @property
    def subtotal(self) -> Decimal: ...


def to_decimal(valor: Optional[Numero]) -> Decimal:
    if valor is None:
        return ZERO
    if isinstance(valor, Decimal):
        return valor
    # str() evita herdar o erro binário de floats
    return Decimal(str(valor))


def arredondar(valor: Optional[Numero]) -> Decimal:
    return to_decimal(valor).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def line_subtotal(
    produto: ProdutoPrecificavel,
    quantidade: int = 0,
    peso_gramas: Optional[Numero] = None,
) -> Decimal:
    if produto.pesavel:
        if produto.preco_por_grama is None:
            raise PricingError(
                f"Produto {produto.codigo} é pesável e não possui preço por grama",
                produto_codigo=produto.codigo,
                campo="preco_por_grama",
            )
        if peso_gramas is None:
            raise PricingError(
                f"Produto {produto.codigo} é pesável e exige o peso em gramas",
                produto_codigo=produto.codigo,
                campo="peso_gramas",
            )
        return arredondar(to_decimal(peso_gramas) * to_decimal(produto.preco_por_grama))

    if produto.preco_unitario is None:
        raise PricingError(
            f"Produto {produto.codigo} não possui preço unitário",
            produto_codigo=produto.codigo,
            campo="preco_unitario",
        )
    return arredondar(to_decimal(produto.preco_unitario) * int(quantidade))


def cart_subtotal(itens: Iterable[LinhaComSubtotal]) -> Decimal:
    total = ZERO
    for item in itens:
        total += item.subtotal
    return arredondar(total)


def desconto_aplicado(subtotal: Numero, desconto: Numero) -> Decimal:
    """Desconto efetivamente aplicado: nunca maior que o subtotal."""
    desconto_dec = arredondar(desconto)
    if desconto_dec < 0:
        raise ValueError("Desconto não pode ser negativo")
    return min(desconto_dec, arredondar(subtotal))


def cart_total(subtotal: Numero, desconto: Numero = ZERO) -> Decimal:
    desconto_dec = arredondar(desconto)
    if desconto_dec < 0:
        raise ValueError("Desconto não pode ser negativo")
    return max(ZERO, arredondar(subtotal) - desconto_dec)


def calcular_troco(total: Numero, valor_recebido: Numero) -> Decimal:
    return max(ZERO, arredondar(valor_recebido) - arredondar(total))
