from __future__ import annotations

from typing import List, Optional, Tuple

from app.api.mesas.contracts.notifier_contract import INotifierContract, TipoNotificacao
from app.api.mesas.contracts.store_contract import EntityKind, IStoreContract, Record
from app.api.mesas.core import pricing
from app.api.mesas.core.carrinho import Carrinho
from app.api.mesas.core.exceptions import (
    EmptyCartError,
    InvalidCustomerCountError,
    ItemPersistenceError,
    MesaDomainError,
    SaleNotFoundError,
    StoreConflictError,
    TableInactiveError,
    TableNotAvailableError,
    TableNotFoundError,
    TableUpdateError,
)
from app.api.mesas.core.locks import mesa_locks
from app.api.mesas.core.maquina_estados import (
    STATUS_COM_VENDA,
    EstadoMesa,
    EventoMesa,
    transicionar,
)
from app.api.mesas.models.model_mesa import StatusMesa
from app.api.mesas.models.model_venda_mesa import StatusVendaMesa
from app.api.mesas.schemas.schema_mesa import MesaOut
from app.api.mesas.schemas.schema_venda_mesa import VendaMetaIn, VendaOut
from app.api.mesas.services.service_venda_helpers import validar_venda_da_mesa
from app.utils.database_utils import now_trimmed
from app.utils.logger import logger


class CommitPedidoService:
    """Converte o carrinho de uma mesa em venda + itens e ocupa a mesa.

    A venda e os itens formam uma unidade: se os itens falham, a venda é
    removida (escrita compensatória). A atualização da mesa é uma escrita
    separada e condicional ao estado lido: se outro processo ocupou a mesa
    nesse meio tempo, a venda é desfeita e a mesa é dada como indisponível.
    Se a escrita falhar por outro motivo a venda fica gravada e
    ``finalize_table_state`` refaz apenas essa etapa.
    """

    def __init__(self, store: IStoreContract, notifier: Optional[INotifierContract] = None):
        self.store = store
        self.notifier = notifier

    # -------- Helpers --------
    def _notificar(self, kind: TipoNotificacao, message: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(kind, message)
        except Exception as e:
            logger.warning(f"[Vendas Mesa] Falha ao notificar ({kind.value}): {e}")

    def _ler_mesa(self, mesa_id: int) -> Tuple[Record, EstadoMesa]:
        mesa = self.store.get(EntityKind.MESA, mesa_id, for_update=True)
        if mesa is None:
            raise TableNotFoundError(mesa_id)
        return mesa, EstadoMesa.from_record(mesa)

    def _validar_pre_condicoes(self, mesa: Record, estado: EstadoMesa, carrinho: Carrinho, meta: VendaMetaIn) -> None:
        if estado.status is not StatusMesa.LIVRE:
            raise TableNotAvailableError(mesa["id"], estado.status)
        if not estado.ativa:
            raise TableInactiveError(mesa["id"], mesa["numero"])
        if carrinho.is_empty:
            raise EmptyCartError(mesa_id=mesa["id"])
        if not 1 <= meta.num_pessoas <= mesa["capacidade"]:
            raise InvalidCustomerCountError(meta.num_pessoas, mesa["capacidade"], mesa_id=mesa["id"])

    def _compensar(self, venda_id: int, itens_ids: List[int]) -> bool:
        """Remove itens e venda já gravados. Devolve False se algo ficou para trás."""
        try:
            for item_id in reversed(itens_ids):
                self.store.delete(EntityKind.VENDA_ITEM, item_id)
            self.store.delete(EntityKind.VENDA, venda_id)
        except Exception as e:
            logger.error(f"[Vendas Mesa] Falha ao desfazer venda {venda_id}: {e}")
            return False
        logger.warning(f"[Vendas Mesa] Venda {venda_id} desfeita ({len(itens_ids)} itens removidos)")
        return True

    # -------- Pedido --------
    def commit_order(self, mesa_id: int, carrinho: Carrinho, meta: VendaMetaIn) -> VendaOut:
        try:
            with mesa_locks.lock(mesa_id):
                venda, mesa = self._commit(mesa_id, carrinho, meta)
        except MesaDomainError as e:
            self._notificar(TipoNotificacao.FALHA, e.message)
            raise
        self._notificar(TipoNotificacao.SUCESSO, f"Pedido criado para Mesa {mesa['numero']}!")
        return venda

    def _commit(self, mesa_id: int, carrinho: Carrinho, meta: VendaMetaIn) -> Tuple[VendaOut, Record]:
        mesa, estado = self._ler_mesa(mesa_id)
        self._validar_pre_condicoes(mesa, estado, carrinho, meta)

        # subtotais calculados antes de qualquer escrita
        linhas = [(item, item.subtotal) for item in carrinho.itens]
        subtotal = pricing.cart_subtotal(carrinho.itens)
        desconto = pricing.desconto_aplicado(subtotal, meta.valor_desconto)
        total = pricing.cart_total(subtotal, desconto)
        if meta.valor_recebido is not None:
            troco = pricing.calcular_troco(total, meta.valor_recebido)
        else:
            troco = pricing.arredondar(meta.valor_troco)

        agora = now_trimmed()
        venda = self.store.insert(
            EntityKind.VENDA,
            {
                "mesa_id": mesa_id,
                "operador_nome": meta.operador_nome,
                "cliente_nome": meta.cliente_nome,
                "num_pessoas": meta.num_pessoas,
                "subtotal": subtotal,
                "valor_desconto": desconto,
                "valor_total": total,
                "tipo_pagamento": meta.tipo_pagamento,
                "valor_troco": troco,
                "status": StatusVendaMesa.ABERTA,
                "observacoes": meta.observacoes,
                "aberta_em": agora,
                "created_at": agora,
                "updated_at": agora,
            },
        )
        venda_id = venda["id"]
        logger.info(f"[Vendas Mesa] Venda {venda_id} criada para mesa {mesa['numero']} (total={total})")

        itens: List[Record] = []
        try:
            for item, subtotal_item in linhas:
                itens.append(
                    self.store.insert(
                        EntityKind.VENDA_ITEM,
                        {
                            "venda_id": venda_id,
                            "produto_codigo": item.produto_codigo,
                            "produto_nome": item.produto_nome,
                            "quantidade": item.quantidade,
                            "peso_gramas": item.peso_gramas,
                            "preco_unitario": item.preco_unitario,
                            "preco_por_grama": item.preco_por_grama,
                            "valor_desconto": pricing.ZERO,
                            "subtotal": subtotal_item,
                            "observacao": item.observacao,
                            "created_at": agora,
                        },
                    )
                )
        except Exception as e:
            compensado = self._compensar(venda_id, [i["id"] for i in itens])
            raise ItemPersistenceError(venda_id, compensado, causa=e) from e
        except BaseException:
            self._compensar(venda_id, [i["id"] for i in itens])
            raise

        novo = transicionar(estado, EventoMesa.ABRIR_COM_VENDA, venda_id=venda_id)
        patch = novo.to_patch()
        patch["updated_at"] = now_trimmed()
        try:
            # só ocupa se a mesa ainda estiver como foi lida (livre, sem venda)
            mesa = self.store.update(EntityKind.MESA, mesa_id, patch, expected=estado.to_patch())
        except StoreConflictError as e:
            self._compensar(venda_id, [i["id"] for i in itens])
            atual = self.store.get(EntityKind.MESA, mesa_id)
            status_atual = StatusMesa(atual["status"]) if atual is not None else estado.status
            logger.warning(f"[Vendas Mesa] Mesa {mesa_id} ocupada por outra operação; venda {venda_id} desfeita")
            raise TableNotAvailableError(mesa_id, status_atual) from e
        except Exception as e:
            carrinho.clear()
            logger.error(f"[Vendas Mesa] Venda {venda_id} gravada, mas a mesa {mesa_id} não foi atualizada: {e}")
            raise TableUpdateError(mesa_id, venda_id, causa=e) from e

        carrinho.clear()
        logger.info(f"[Vendas Mesa] Mesa {mesa['numero']} ocupada pela venda {venda_id}")
        return VendaOut.model_validate({**venda, "itens": itens}), mesa

    def finalize_table_state(self, mesa_id: int, venda_id: int) -> MesaOut:
        """Refaz só a ocupação da mesa para uma venda já gravada. Idempotente."""
        with mesa_locks.lock(mesa_id):
            mesa, estado = self._ler_mesa(mesa_id)

            if estado.venda_atual_id == venda_id and estado.status in STATUS_COM_VENDA:
                return MesaOut.model_validate(mesa)

            validar_venda_da_mesa(self.store, mesa_id, venda_id, estado.status)
            novo = transicionar(estado, EventoMesa.ABRIR_COM_VENDA, venda_id=venda_id)
            patch = novo.to_patch()
            patch["updated_at"] = now_trimmed()
            try:
                mesa = self.store.update(EntityKind.MESA, mesa_id, patch, expected=estado.to_patch())
            except StoreConflictError as e:
                raise TableNotAvailableError(mesa_id, estado.status) from e
            except Exception as e:
                raise TableUpdateError(mesa_id, venda_id, causa=e) from e

        logger.info(f"[Vendas Mesa] Mesa {mesa['numero']} finalizada com a venda {venda_id}")
        self._notificar(TipoNotificacao.SUCESSO, f"Pedido criado para Mesa {mesa['numero']}!")
        return MesaOut.model_validate(mesa)

    def obter_venda(self, venda_id: int) -> VendaOut:
        venda = self.store.get(EntityKind.VENDA, venda_id)
        if venda is None:
            raise SaleNotFoundError(venda_id)
        itens = self.store.query(EntityKind.VENDA_ITEM, {"venda_id": venda_id})
        return VendaOut.model_validate({**venda, "itens": itens})
