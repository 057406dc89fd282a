from .model_mesa import MesaModel, StatusMesa
from .model_venda_mesa import VendaMesaModel, VendaMesaItemModel, StatusVendaMesa, TipoPagamento

__all__ = [
    "MesaModel",
    "StatusMesa",
    "VendaMesaModel",
    "VendaMesaItemModel",
    "StatusVendaMesa",
    "TipoPagamento",
]
