from __future__ import annotations

from typing import List, Optional

from app.api.mesas.contracts.store_contract import EntityKind, IStoreContract, Record
from app.api.mesas.core.exceptions import DuplicateTableNumberError, StoreConflictError, TableNotFoundError
from app.api.mesas.core.locks import mesa_locks
from app.api.mesas.core.maquina_estados import (
    EVENTOS_ABERTURA,
    EstadoMesa,
    EventoMesa,
    eventos_permitidos,
    transicionar,
)
from app.api.mesas.models.model_mesa import StatusMesa
from app.api.mesas.schemas.schema_mesa import (
    EventosPermitidosOut,
    MesaIn,
    MesaOut,
    MesaStatsOut,
    MesaUpdate,
    ProximoNumeroOut,
)
from app.api.mesas.services.service_venda_helpers import validar_venda_da_mesa
from app.utils.database_utils import now_trimmed
from app.utils.logger import logger


class MesaService:
    """Service para cadastro de mesas e transições de status."""

    def __init__(self, store: IStoreContract):
        self.store = store

    # -------- Helpers --------
    def _get_record(self, mesa_id: int, for_update: bool = False) -> Record:
        mesa = self.store.get(EntityKind.MESA, mesa_id, for_update=for_update)
        if mesa is None:
            raise TableNotFoundError(mesa_id)
        return mesa

    def _validar_numero_unico(self, numero: int, ignorar_id: Optional[int] = None) -> None:
        for mesa in self.store.query(EntityKind.MESA, {"numero": numero, "ativa": True}):
            if mesa["id"] != ignorar_id:
                raise DuplicateTableNumberError(numero, mesa_id=mesa["id"])

    # -------- Cadastro --------
    def criar_mesa(self, data: MesaIn) -> MesaOut:
        """Cria uma mesa livre; o número precisa ser único entre as mesas ativas."""
        agora = now_trimmed()
        with mesa_locks.numeracao():
            self._validar_numero_unico(data.numero)
            try:
                mesa = self.store.insert(
                    EntityKind.MESA,
                    {
                        "numero": data.numero,
                        "nome": data.nome or f"Mesa {data.numero}",
                        "capacidade": data.capacidade,
                        "localizacao": data.localizacao,
                        "status": StatusMesa.LIVRE,
                        "ativa": True,
                        "venda_atual_id": None,
                        "created_at": agora,
                        "updated_at": agora,
                    },
                )
            except StoreConflictError as e:
                # outro processo gravou o mesmo número entre a checagem e o insert
                raise DuplicateTableNumberError(data.numero) from e
        logger.info(f"[Mesas] Mesa {mesa['numero']} criada (id={mesa['id']})")
        return MesaOut.model_validate(mesa)

    def atualizar_mesa(self, mesa_id: int, data: MesaUpdate) -> MesaOut:
        """Atualiza número, nome, capacidade ou localização. Status só muda por transição."""
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        with mesa_locks.lock(mesa_id), mesa_locks.numeracao():
            mesa = self._get_record(mesa_id, for_update=True)
            if not update_data:
                return MesaOut.model_validate(mesa)

            novo_numero = update_data.get("numero")
            if novo_numero is not None and novo_numero != mesa["numero"] and mesa["ativa"]:
                self._validar_numero_unico(novo_numero, ignorar_id=mesa_id)

            update_data["updated_at"] = now_trimmed()
            try:
                mesa = self.store.update(EntityKind.MESA, mesa_id, update_data)
            except StoreConflictError as e:
                raise DuplicateTableNumberError(update_data.get("numero", mesa["numero"]), mesa_id=mesa_id) from e
        logger.info(f"[Mesas] Mesa id={mesa_id} atualizada: {sorted(update_data)}")
        return MesaOut.model_validate(mesa)

    def desativar_mesa(self, mesa_id: int) -> MesaOut:
        """Soft delete: a mesa some da listagem, status e histórico ficam intactos."""
        with mesa_locks.lock(mesa_id):
            mesa = self._get_record(mesa_id, for_update=True)
            if mesa["ativa"]:
                mesa = self.store.update(
                    EntityKind.MESA, mesa_id, {"ativa": False, "updated_at": now_trimmed()}
                )
                logger.info(f"[Mesas] Mesa {mesa['numero']} desativada (id={mesa_id})")
        return MesaOut.model_validate(mesa)

    def reativar_mesa(self, mesa_id: int) -> MesaOut:
        with mesa_locks.lock(mesa_id), mesa_locks.numeracao():
            mesa = self._get_record(mesa_id, for_update=True)
            if not mesa["ativa"]:
                self._validar_numero_unico(mesa["numero"], ignorar_id=mesa_id)
                try:
                    mesa = self.store.update(
                        EntityKind.MESA, mesa_id, {"ativa": True, "updated_at": now_trimmed()}
                    )
                except StoreConflictError as e:
                    raise DuplicateTableNumberError(mesa["numero"], mesa_id=mesa_id) from e
                logger.info(f"[Mesas] Mesa {mesa['numero']} reativada (id={mesa_id})")
        return MesaOut.model_validate(mesa)

    # -------- Consulta --------
    def obter_mesa(self, mesa_id: int) -> MesaOut:
        mesa = self._get_record(mesa_id)
        EstadoMesa.from_record(mesa)
        return MesaOut.model_validate(mesa)

    def listar_mesas(self, ativa: Optional[bool] = True, status: Optional[StatusMesa] = None) -> List[MesaOut]:
        """Lista mesas ordenadas pelo número. ``ativa=None`` traz ativas e inativas."""
        filtro: Record = {}
        if ativa is not None:
            filtro["ativa"] = ativa
        if status is not None:
            filtro["status"] = StatusMesa(status)
        mesas = self.store.query(EntityKind.MESA, filtro)
        mesas.sort(key=lambda m: (m["numero"], m["id"]))
        return [MesaOut.model_validate(m) for m in mesas]

    def proximo_numero(self) -> ProximoNumeroOut:
        """Sugere o maior número entre as mesas ativas + 1."""
        numeros = [m["numero"] for m in self.store.query(EntityKind.MESA, {"ativa": True})]
        numero = max(numeros) + 1 if numeros else 1
        return ProximoNumeroOut(numero=numero, nome_sugerido=f"Mesa {numero}")

    def estatisticas(self) -> MesaStatsOut:
        mesas = self.store.query(EntityKind.MESA)
        ativas = [m for m in mesas if m["ativa"]]

        def contar(status: StatusMesa) -> int:
            return sum(1 for m in ativas if StatusMesa(m["status"]) is status)

        return MesaStatsOut(
            total=len(mesas),
            livres=contar(StatusMesa.LIVRE),
            ocupadas=contar(StatusMesa.OCUPADA),
            aguardando_conta=contar(StatusMesa.AGUARDANDO_CONTA),
            em_limpeza=contar(StatusMesa.LIMPEZA),
            ativas=len(ativas),
            inativas=len(mesas) - len(ativas),
        )

    # -------- Status --------
    def transicionar_mesa(self, mesa_id: int, evento: EventoMesa, venda_id: Optional[int] = None) -> MesaOut:
        """Aplica um evento da máquina de estados e grava status e venda atual juntos.

        Em caso de transição inválida nada é gravado. ``open_with_sale`` só
        aceita uma venda aberta da própria mesa.
        """
        evento = EventoMesa(evento)
        with mesa_locks.lock(mesa_id):
            mesa = self._get_record(mesa_id, for_update=True)
            atual = EstadoMesa.from_record(mesa)
            novo = transicionar(atual, evento, venda_id=venda_id)
            if evento is EventoMesa.ABRIR_COM_VENDA:
                validar_venda_da_mesa(self.store, mesa_id, venda_id, atual.status)
            patch = novo.to_patch()
            patch["updated_at"] = now_trimmed()
            mesa = self.store.update(EntityKind.MESA, mesa_id, patch)
        logger.info(
            f"[Mesas] Mesa {mesa['numero']}: {atual.status.value} --{evento.value}--> {novo.status.value}"
        )
        return MesaOut.model_validate(mesa)

    def eventos_permitidos(self, mesa_id: int) -> EventosPermitidosOut:
        mesa = self._get_record(mesa_id)
        status = StatusMesa(mesa["status"])
        eventos = eventos_permitidos(status)
        if not mesa["ativa"]:
            eventos = [e for e in eventos if e not in EVENTOS_ABERTURA]
        return EventosPermitidosOut(mesa_id=mesa_id, status=status, eventos=eventos)
