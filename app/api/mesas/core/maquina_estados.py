"""Máquina de estados da mesa.

Única fonte das transições de status e da relação com a venda atual:

    free             --open_with_sale(venda)-->  occupied          (venda definida)
    free             --open_without_sale----->  occupied          (sem venda)
    occupied         --request_bill---------->  awaiting_payment  (venda mantida)
    awaiting_payment --close_bill------------>  cleaning          (venda limpa)
    cleaning         --mark_clean------------>  free              (venda limpa)
    occupied         --cancel_sale----------->  free              (venda limpa)

Qualquer outro par (status, evento) é inválido.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from app.api.mesas.core.exceptions import (
    InvalidTransitionError,
    TableInactiveError,
    TableStateInvariantError,
)
from app.api.mesas.models.model_mesa import StatusMesa


class EventoMesa(str, enum.Enum):
    ABRIR_COM_VENDA = "open_with_sale"
    ABRIR_SEM_VENDA = "open_without_sale"
    PEDIR_CONTA = "request_bill"
    FECHAR_CONTA = "close_bill"
    MARCAR_LIMPA = "mark_clean"
    CANCELAR_VENDA = "cancel_sale"


class _AcaoVenda(enum.Enum):
    DEFINIR = "definir"
    LIMPAR = "limpar"
    MANTER = "manter"


TRANSICOES: Dict[Tuple[StatusMesa, EventoMesa], Tuple[StatusMesa, _AcaoVenda]] = {
    (StatusMesa.LIVRE, EventoMesa.ABRIR_COM_VENDA): (StatusMesa.OCUPADA, _AcaoVenda.DEFINIR),
    (StatusMesa.LIVRE, EventoMesa.ABRIR_SEM_VENDA): (StatusMesa.OCUPADA, _AcaoVenda.LIMPAR),
    (StatusMesa.OCUPADA, EventoMesa.PEDIR_CONTA): (StatusMesa.AGUARDANDO_CONTA, _AcaoVenda.MANTER),
    (StatusMesa.AGUARDANDO_CONTA, EventoMesa.FECHAR_CONTA): (StatusMesa.LIMPEZA, _AcaoVenda.LIMPAR),
    (StatusMesa.LIMPEZA, EventoMesa.MARCAR_LIMPA): (StatusMesa.LIVRE, _AcaoVenda.LIMPAR),
    (StatusMesa.OCUPADA, EventoMesa.CANCELAR_VENDA): (StatusMesa.LIVRE, _AcaoVenda.LIMPAR),
}

EVENTOS_ABERTURA = frozenset({EventoMesa.ABRIR_COM_VENDA, EventoMesa.ABRIR_SEM_VENDA})
STATUS_COM_VENDA = frozenset({StatusMesa.OCUPADA, StatusMesa.AGUARDANDO_CONTA})


@dataclass(frozen=True)
class EstadoMesa:
    status: StatusMesa
    venda_atual_id: Optional[int] = None
    ativa: bool = True
    mesa_id: Optional[int] = None
    numero: Optional[int] = None

    @classmethod
    def from_record(cls, record: dict) -> "EstadoMesa":
        estado = cls(
            status=StatusMesa(record["status"]),
            venda_atual_id=record.get("venda_atual_id"),
            ativa=bool(record.get("ativa", True)),
            mesa_id=record.get("id"),
            numero=record.get("numero"),
        )
        verificar_invariante(estado)
        return estado

    def to_patch(self) -> dict:
        return {"status": self.status, "venda_atual_id": self.venda_atual_id}


def verificar_invariante(estado: EstadoMesa) -> None:
    """Mesa livre/em limpeza nunca tem venda; venda só existe com mesa ocupada/aguardando conta."""
    if estado.venda_atual_id is not None and estado.status not in STATUS_COM_VENDA:
        raise TableStateInvariantError(
            f"Mesa com status '{estado.status.value}' não pode ter venda atual",
            mesa_id=estado.mesa_id,
            status_atual=estado.status.value,
            venda_atual_id=estado.venda_atual_id,
        )


def eventos_permitidos(status: StatusMesa) -> list[EventoMesa]:
    return [evento for (origem, evento) in TRANSICOES if origem == status]


def transicionar(estado: EstadoMesa, evento: EventoMesa, venda_id: Optional[int] = None) -> EstadoMesa:
    """Aplica o evento e devolve o novo estado; o estado recebido nunca é alterado."""
    evento = EventoMesa(evento)

    if evento in EVENTOS_ABERTURA and not estado.ativa:
        raise TableInactiveError(estado.mesa_id, estado.numero)

    destino = TRANSICOES.get((estado.status, evento))
    if destino is None:
        raise InvalidTransitionError(estado.status, evento, mesa_id=estado.mesa_id)

    novo_status, acao = destino
    if acao is _AcaoVenda.DEFINIR:
        if venda_id is None:
            raise InvalidTransitionError(
                estado.status,
                evento,
                message="Evento 'open_with_sale' exige o id da venda",
                mesa_id=estado.mesa_id,
            )
        nova_venda = venda_id
    elif acao is _AcaoVenda.LIMPAR:
        nova_venda = None
    else:
        nova_venda = estado.venda_atual_id

    novo_estado = replace(estado, status=novo_status, venda_atual_id=nova_venda)
    verificar_invariante(novo_estado)
    return novo_estado
