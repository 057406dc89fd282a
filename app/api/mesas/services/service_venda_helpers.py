from app.api.mesas.contracts.store_contract import EntityKind, IStoreContract, Record
from app.api.mesas.core.exceptions import InvalidTransitionError, SaleNotFoundError
from app.api.mesas.core.maquina_estados import EventoMesa
from app.api.mesas.models.model_mesa import StatusMesa
from app.api.mesas.models.model_venda_mesa import StatusVendaMesa


def validar_venda_da_mesa(store: IStoreContract, mesa_id: int, venda_id: int, status_atual: StatusMesa) -> Record:
    """Garante que a venda existe, pertence à mesa e está aberta antes de vinculá-la."""
    venda = store.get(EntityKind.VENDA, venda_id)
    if venda is None:
        raise SaleNotFoundError(venda_id)
    if venda["mesa_id"] != mesa_id:
        raise InvalidTransitionError(
            status_atual,
            EventoMesa.ABRIR_COM_VENDA,
            message=f"Venda {venda_id} não pertence à mesa {mesa_id}",
            mesa_id=mesa_id,
            venda_id=venda_id,
        )
    if StatusVendaMesa(venda["status"]) is not StatusVendaMesa.ABERTA:
        raise InvalidTransitionError(
            status_atual,
            EventoMesa.ABRIR_COM_VENDA,
            message=f"Venda {venda_id} não está aberta",
            mesa_id=mesa_id,
            venda_id=venda_id,
        )
    return venda
