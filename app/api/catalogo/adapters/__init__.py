from .produto_adapter import ProdutoAdapter

__all__ = [
    "ProdutoAdapter",
]
