from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, constr

from app.api.mesas.models.model_venda_mesa import StatusVendaMesa, TipoPagamento
from app.config.settings import OPERADOR_PADRAO


class VendaMetaIn(BaseModel):
    """Dados da venda informados na confirmação do pedido da mesa."""
    operador_nome: constr(min_length=1, max_length=100) = OPERADOR_PADRAO
    cliente_nome: Optional[constr(max_length=100)] = None
    num_pessoas: int = Field(default=1, description="Entre 1 e a capacidade da mesa")
    valor_desconto: Decimal = Field(default=Decimal("0"), ge=0)
    tipo_pagamento: TipoPagamento = TipoPagamento.DINHEIRO
    valor_troco: Decimal = Field(default=Decimal("0"), ge=0)
    valor_recebido: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Quando informado, o troco é calculado a partir do total",
    )
    observacoes: Optional[constr(max_length=500)] = None


class VendaItemOut(BaseModel):
    id: int
    venda_id: int
    produto_codigo: str
    produto_nome: str
    quantidade: int
    peso_gramas: Optional[Decimal] = None
    preco_unitario: Optional[Decimal] = None
    preco_por_grama: Optional[Decimal] = None
    valor_desconto: Decimal = Decimal("0")
    subtotal: Decimal
    observacao: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class VendaOut(BaseModel):
    id: int
    mesa_id: int
    operador_nome: str
    cliente_nome: Optional[str] = None
    num_pessoas: int
    subtotal: Decimal
    valor_desconto: Decimal
    valor_total: Decimal
    tipo_pagamento: TipoPagamento
    valor_troco: Decimal
    status: StatusVendaMesa
    observacoes: Optional[str] = None
    aberta_em: datetime
    itens: List[VendaItemOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class FinalizarMesaRequest(BaseModel):
    venda_id: int = Field(..., gt=0)
