from fastapi import APIRouter, Depends, Path

from app.api.mesas.schemas.schema_venda_mesa import VendaOut
from app.api.mesas.services.service_commit_pedido import CommitPedidoService
from app.api.mesas.services.dependencies import get_commit_pedido_service

router = APIRouter(
    prefix="/api/mesas/admin/vendas",
    tags=["Admin - Mesas - Vendas"],
)


@router.get("/{venda_id}", response_model=VendaOut)
def obter_venda(venda_id: int = Path(..., gt=0), svc: CommitPedidoService = Depends(get_commit_pedido_service)):
    """Retorna a venda da mesa com os itens gravados."""
    return svc.obter_venda(venda_id)
