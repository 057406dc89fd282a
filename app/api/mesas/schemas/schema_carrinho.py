from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, constr

from app.api.mesas.core import pricing
from app.api.mesas.core.carrinho import Carrinho


class CarrinhoCreate(BaseModel):
    mesa_id: int = Field(..., gt=0)


class AdicionarItemCarrinhoRequest(BaseModel):
    produto_codigo: constr(min_length=1)
    quantidade: int = Field(default=1, ge=1)
    peso_gramas: Optional[Decimal] = Field(default=None, gt=0, description="Obrigatório para produtos pesáveis")
    observacao: Optional[constr(max_length=255)] = None


class AtualizarQuantidadeRequest(BaseModel):
    quantidade: int = Field(..., description="Zero ou negativo remove o item")


class ItemCarrinhoOut(BaseModel):
    produto_codigo: str
    produto_nome: str
    pesavel: bool
    quantidade: int
    peso_gramas: Optional[Decimal] = None
    preco_unitario: Optional[Decimal] = None
    preco_por_grama: Optional[Decimal] = None
    subtotal: Decimal
    observacao: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CarrinhoOut(BaseModel):
    id: str
    mesa_id: Optional[int] = None
    itens: List[ItemCarrinhoOut]
    quantidade_itens: int
    subtotal: Decimal
    valor_desconto: Decimal
    total: Decimal

    @classmethod
    def from_carrinho(cls, carrinho_id: str, carrinho: Carrinho, desconto: Decimal = pricing.ZERO) -> "CarrinhoOut":
        subtotal = carrinho.subtotal
        desconto = pricing.desconto_aplicado(subtotal, desconto)
        return cls(
            id=carrinho_id,
            mesa_id=carrinho.mesa_id,
            itens=[ItemCarrinhoOut.model_validate(item) for item in carrinho.itens],
            quantidade_itens=len(carrinho),
            subtotal=subtotal,
            valor_desconto=desconto,
            total=pricing.cart_total(subtotal, desconto),
        )
