from typing import Optional, List
from sqlalchemy.orm import Session

from app.api.catalogo.contracts.produto_contract import IProdutoContract, Produto
from app.api.catalogo.models.model_produto import ProdutoModel


class ProdutoAdapter(IProdutoContract):
    """Implementação do contrato de produtos sobre a tabela `produtos`."""

    def __init__(self, db: Session):
        self.db = db

    def _to_produto(self, produto: ProdutoModel) -> Produto:
        return Produto(
            codigo=produto.codigo,
            nome=produto.nome,
            pesavel=bool(produto.pesavel),
            preco_unitario=produto.preco_unitario,
            preco_por_grama=produto.preco_por_grama,
            ativo=bool(getattr(produto, "ativo", True)),
        )

    def obter_produto_por_codigo(self, codigo: str) -> Optional[Produto]:
        produto = (
            self.db.query(ProdutoModel)
            .filter(ProdutoModel.codigo == codigo)
            .first()
        )
        if not produto:
            return None
        return self._to_produto(produto)

    def listar_produtos(self, apenas_ativos: bool = True) -> List[Produto]:
        query = self.db.query(ProdutoModel)
        if apenas_ativos:
            query = query.filter(ProdutoModel.ativo.is_(True))
        return [self._to_produto(p) for p in query.order_by(ProdutoModel.nome).all()]
