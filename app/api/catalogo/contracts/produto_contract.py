from abc import ABC, abstractmethod
from typing import Optional, List
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, constr

from app.api.mesas.core.exceptions import ProductNotFoundError


class Produto(BaseModel):
    """Produto do catálogo (somente leitura) já validado na fronteira do contrato."""
    codigo: constr(min_length=1, strip_whitespace=True)
    nome: str
    pesavel: bool = False
    preco_unitario: Optional[Decimal] = Field(default=None, ge=0)
    preco_por_grama: Optional[Decimal] = Field(default=None, ge=0)
    ativo: bool = True

    model_config = ConfigDict(from_attributes=True, frozen=True)


class IProdutoContract(ABC):
    """Contrato para acesso a produtos do contexto Catalogo."""

    @abstractmethod
    def obter_produto_por_codigo(self, codigo: str) -> Optional[Produto]:
        """Obtém o produto pelo código, ou None se não existir."""
        raise NotImplementedError

    @abstractmethod
    def listar_produtos(self, apenas_ativos: bool = True) -> List[Produto]:
        """Lista produtos do catálogo."""
        raise NotImplementedError

    def lookup(self, codigo: str) -> Produto:
        """Produto vendável: inexistente ou inativo levanta ``ProductNotFoundError``."""
        produto = self.obter_produto_por_codigo(codigo)
        if produto is None or not produto.ativo:
            raise ProductNotFoundError(codigo)
        return produto
