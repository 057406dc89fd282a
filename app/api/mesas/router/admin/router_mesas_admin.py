from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Optional

from app.api.mesas.models.model_mesa import StatusMesa
from app.api.mesas.services.service_mesas import MesaService
from app.api.mesas.services.service_commit_pedido import CommitPedidoService
from app.api.mesas.services.dependencies import get_mesa_service, get_commit_pedido_service
from app.api.mesas.schemas.schema_mesa import (
    MesaIn,
    MesaOut,
    MesaUpdate,
    MesaTransicaoRequest,
    MesaStatsOut,
    ProximoNumeroOut,
    EventosPermitidosOut,
)
from app.api.mesas.schemas.schema_venda_mesa import FinalizarMesaRequest

router = APIRouter(
    prefix="/api/mesas/admin/mesas",
    tags=["Admin - Mesas"],
)


@router.get("", response_model=List[MesaOut])
def listar_mesas(
    ativa: Optional[bool] = Query(True, description="Filtrar por mesas ativas (true) ou inativas (false)"),
    incluir_inativas: bool = Query(False, description="Inclui mesas desativadas"),
    status_mesa: Optional[StatusMesa] = Query(None, alias="status", description="Filtrar por status"),
    svc: MesaService = Depends(get_mesa_service),
):
    """
    Lista as mesas ordenadas pelo número.

    Por padrão retorna apenas as mesas ativas.
    """
    return svc.listar_mesas(ativa=None if incluir_inativas else ativa, status=status_mesa)


@router.get("/stats", response_model=MesaStatsOut)
def estatisticas_mesas(svc: MesaService = Depends(get_mesa_service)):
    """Contadores de mesas por status (somente ativas) e de ativas/inativas."""
    return svc.estatisticas()


@router.get("/proximo-numero", response_model=ProximoNumeroOut)
def proximo_numero(svc: MesaService = Depends(get_mesa_service)):
    """Sugere o próximo número livre (maior número ativo + 1) e o nome padrão."""
    return svc.proximo_numero()


@router.get("/{mesa_id}", response_model=MesaOut)
def obter_mesa(mesa_id: int = Path(..., gt=0), svc: MesaService = Depends(get_mesa_service)):
    return svc.obter_mesa(mesa_id)


@router.post("", response_model=MesaOut, status_code=status.HTTP_201_CREATED)
def criar_mesa(data: MesaIn, svc: MesaService = Depends(get_mesa_service)):
    """
    Cria uma nova mesa livre.

    O número deve ser único entre as mesas ativas; sem nome, usa "Mesa N".
    """
    return svc.criar_mesa(data)


@router.put("/{mesa_id}", response_model=MesaOut)
def atualizar_mesa(
    data: MesaUpdate,
    mesa_id: int = Path(..., gt=0),
    svc: MesaService = Depends(get_mesa_service),
):
    """Atualiza número, nome, capacidade ou localização da mesa."""
    return svc.atualizar_mesa(mesa_id, data)


@router.delete("/{mesa_id}", response_model=MesaOut)
def desativar_mesa(mesa_id: int = Path(..., gt=0), svc: MesaService = Depends(get_mesa_service)):
    """
    Desativa a mesa (soft delete).

    O status e o histórico de vendas não são alterados.
    """
    return svc.desativar_mesa(mesa_id)


@router.post("/{mesa_id}/reativar", response_model=MesaOut)
def reativar_mesa(mesa_id: int = Path(..., gt=0), svc: MesaService = Depends(get_mesa_service)):
    return svc.reativar_mesa(mesa_id)


@router.get("/{mesa_id}/eventos", response_model=EventosPermitidosOut)
def eventos_permitidos(mesa_id: int = Path(..., gt=0), svc: MesaService = Depends(get_mesa_service)):
    """Eventos de status aceitos pela mesa no estado atual."""
    return svc.eventos_permitidos(mesa_id)


@router.post("/{mesa_id}/transicao", response_model=MesaOut)
def transicionar_mesa(
    body: MesaTransicaoRequest,
    mesa_id: int = Path(..., gt=0),
    svc: MesaService = Depends(get_mesa_service),
):
    """
    Aplica um evento de status na mesa.

    - **request_bill**: ocupada -> aguardando conta
    - **close_bill**: aguardando conta -> limpeza
    - **mark_clean**: limpeza -> livre
    - **cancel_sale**: ocupada -> livre
    - **open_without_sale** / **open_with_sale**: livre -> ocupada
      (open_with_sale exige `venda_id` de uma venda aberta desta mesa; 404 se não existir)

    Eventos inválidos para o status atual retornam 409 sem alterar a mesa.
    """
    return svc.transicionar_mesa(mesa_id, body.evento, venda_id=body.venda_id)


@router.post("/{mesa_id}/finalizar", response_model=MesaOut)
def finalizar_mesa(
    body: FinalizarMesaRequest,
    mesa_id: int = Path(..., gt=0),
    svc: CommitPedidoService = Depends(get_commit_pedido_service),
):
    """
    Conclui a ocupação da mesa para uma venda já gravada.

    Usado quando a confirmação do pedido gravou a venda mas falhou ao
    atualizar a mesa. Repetir a chamada é seguro.
    """
    return svc.finalize_table_state(mesa_id, body.venda_id)
