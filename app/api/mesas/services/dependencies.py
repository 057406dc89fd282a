from fastapi import Depends
from sqlalchemy.orm import Session

from app.database.db_connection import get_db
from app.api.mesas.contracts.store_contract import IStoreContract
from app.api.mesas.contracts.notifier_contract import INotifierContract
from app.api.mesas.adapters.store_adapter import SqlAlchemyStoreAdapter
from app.api.mesas.adapters.notifier_adapter import LogNotifierAdapter
from app.api.mesas.services.service_mesas import MesaService
from app.api.mesas.services.service_commit_pedido import CommitPedidoService
from app.api.mesas.services.service_carrinhos import CarrinhoRegistry, carrinhos


def get_store_contract(db: Session = Depends(get_db)) -> IStoreContract:
    """Dependency para obter o store das vendas por mesa"""
    return SqlAlchemyStoreAdapter(db)


def get_notifier_contract() -> INotifierContract:
    return LogNotifierAdapter()


def get_carrinho_registry() -> CarrinhoRegistry:
    return carrinhos


def get_mesa_service(store: IStoreContract = Depends(get_store_contract)) -> MesaService:
    return MesaService(store)


def get_commit_pedido_service(
    store: IStoreContract = Depends(get_store_contract),
    notifier: INotifierContract = Depends(get_notifier_contract),
) -> CommitPedidoService:
    return CommitPedidoService(store, notifier=notifier)
