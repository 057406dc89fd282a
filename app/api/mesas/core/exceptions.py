"""Erros de domínio das vendas por mesa.

Toda exceção carrega um ``http_status`` (usado pelo handler global da API)
e um dicionário ``context`` com os ids/estados envolvidos, para que o
chamador decida entre repetir a operação ou abortar.
"""
from __future__ import annotations

from typing import Any, Optional


class MesaDomainError(Exception):
    http_status: int = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = {k: v for k, v in context.items() if v is not None}

    def __str__(self) -> str:
        return self.message


# ─── Catálogo / preços ──────────────────────────────────────────────
class PricingError(MesaDomainError):
    """Campo de preço obrigatório ausente para o tipo do produto."""
    http_status = 422


class ProductNotFoundError(MesaDomainError):
    http_status = 404

    def __init__(self, produto_codigo: str):
        super().__init__(f"Produto {produto_codigo} não encontrado", produto_codigo=produto_codigo)
        self.produto_codigo = produto_codigo


class InvalidQuantityError(MesaDomainError):
    http_status = 422


# ─── Mesas ──────────────────────────────────────────────────────────
class InvalidTransitionError(MesaDomainError):
    http_status = 409

    def __init__(self, status_atual, evento, message: Optional[str] = None, **context: Any):
        status_valor = getattr(status_atual, "value", status_atual)
        evento_valor = getattr(evento, "value", evento)
        super().__init__(
            message or f"Transição inválida: evento '{evento_valor}' não é permitido no status '{status_valor}'",
            status_atual=status_valor,
            evento=evento_valor,
            **context,
        )
        self.status_atual = status_atual
        self.evento = evento


class TableStateInvariantError(MesaDomainError):
    """Status e venda atual da mesa estão inconsistentes."""
    http_status = 500


class DuplicateTableNumberError(MesaDomainError):
    http_status = 409

    def __init__(self, numero: int, mesa_id: Optional[int] = None):
        super().__init__(
            f"Já existe uma mesa ativa com o número {numero}",
            numero=numero,
            mesa_id=mesa_id,
        )
        self.numero = numero


class TableInactiveError(MesaDomainError):
    http_status = 409

    def __init__(self, mesa_id: Optional[int], numero: Optional[int] = None):
        super().__init__(f"Mesa {numero if numero is not None else mesa_id} está inativa", mesa_id=mesa_id, numero=numero)
        self.mesa_id = mesa_id


class TableNotFoundError(MesaDomainError):
    http_status = 404

    def __init__(self, mesa_id: int):
        super().__init__("Mesa não encontrada", mesa_id=mesa_id)
        self.mesa_id = mesa_id


class TableNotAvailableError(MesaDomainError):
    http_status = 409

    def __init__(self, mesa_id: int, status_atual):
        status_valor = getattr(status_atual, "value", status_atual)
        super().__init__(
            f"Mesa {mesa_id} não está livre (status atual: {status_valor})",
            mesa_id=mesa_id,
            status_atual=status_valor,
        )
        self.mesa_id = mesa_id
        self.status_atual = status_atual


# ─── Carrinho / venda ───────────────────────────────────────────────
class EmptyCartError(MesaDomainError):
    http_status = 422

    def __init__(self, mesa_id: Optional[int] = None):
        super().__init__("Adicione pelo menos um item ao pedido", mesa_id=mesa_id)


class InvalidCustomerCountError(MesaDomainError):
    http_status = 422

    def __init__(self, num_pessoas: int, capacidade: int, mesa_id: Optional[int] = None):
        super().__init__(
            f"Número de pessoas ({num_pessoas}) deve estar entre 1 e a capacidade da mesa ({capacidade})",
            num_pessoas=num_pessoas,
            capacidade=capacidade,
            mesa_id=mesa_id,
        )


class CartNotFoundError(MesaDomainError):
    http_status = 404

    def __init__(self, carrinho_id: str):
        super().__init__("Carrinho não encontrado", carrinho_id=carrinho_id)


class SaleNotFoundError(MesaDomainError):
    http_status = 404

    def __init__(self, venda_id: int):
        super().__init__("Venda não encontrada", venda_id=venda_id)
        self.venda_id = venda_id


# ─── Persistência ───────────────────────────────────────────────────
class StoreError(MesaDomainError):
    """Falha opaca de infraestrutura do store."""
    http_status = 503


class StoreConflictError(StoreError):
    """Escrita recusada: violação de unicidade ou registro diferente do esperado."""
    http_status = 409


class ItemPersistenceError(MesaDomainError):
    """Itens da venda não foram gravados; a venda foi compensada (removida)."""
    http_status = 500

    def __init__(self, venda_id: Optional[int], compensado: bool, causa: Optional[BaseException] = None):
        super().__init__(
            "Erro ao gravar itens do pedido; venda desfeita" if compensado
            else "Erro ao gravar itens do pedido; falha ao desfazer a venda",
            venda_id=venda_id,
            compensado=compensado,
            causa=str(causa) if causa is not None else None,
        )
        self.venda_id = venda_id
        self.compensado = compensado


class TableUpdateError(MesaDomainError):
    """Venda gravada, mas o status da mesa não foi atualizado (recuperável)."""
    http_status = 500

    def __init__(self, mesa_id: int, venda_id: int, causa: Optional[BaseException] = None):
        super().__init__(
            f"Venda {venda_id} criada, mas a mesa {mesa_id} não foi atualizada",
            mesa_id=mesa_id,
            venda_id=venda_id,
            causa=str(causa) if causa is not None else None,
        )
        self.mesa_id = mesa_id
        self.venda_id = venda_id
