from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from threading import Lock
from typing import Callable, Dict, Optional

from app.api.catalogo.contracts.produto_contract import IProdutoContract
from app.api.mesas.core.carrinho import Carrinho
from app.api.mesas.core.exceptions import CartNotFoundError
from app.config.settings import CARRINHO_TTL_MINUTOS
from app.utils.database_utils import now_trimmed
from app.utils.logger import logger


class CarrinhoRegistry:
    """Guarda os carrinhos em composição, um por handle, enquanto o pedido da mesa é montado.

    Os carrinhos vivem só na memória do processo: um restart descarta pedidos não confirmados.
    Handles sem uso por mais de ``ttl`` são removidos na próxima criação ou leitura.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(minutes=CARRINHO_TTL_MINUTOS),
        relogio: Callable[[], datetime] = now_trimmed,
    ):
        self._carrinhos: Dict[str, Carrinho] = {}
        self._tocado_em: Dict[str, datetime] = {}
        self._lock = Lock()
        self.ttl = ttl
        self._relogio = relogio

    def _limpar_expirados(self, agora: datetime) -> int:
        expirados = [cid for cid, tocado in self._tocado_em.items() if agora - tocado > self.ttl]
        for cid in expirados:
            self._carrinhos.pop(cid, None)
            self._tocado_em.pop(cid, None)
        return len(expirados)

    def limpar_carrinhos_expirados(self) -> int:
        """Remove carrinhos parados há mais que o TTL e devolve quantos saíram."""
        with self._lock:
            count = self._limpar_expirados(self._relogio())
        if count:
            logger.info(f"[Carrinho] {count} carrinho(s) expirado(s) removido(s)")
        return count

    def criar(self, mesa_id: Optional[int] = None, catalogo: Optional[IProdutoContract] = None) -> str:
        self.limpar_carrinhos_expirados()
        carrinho_id = uuid.uuid4().hex
        with self._lock:
            self._carrinhos[carrinho_id] = Carrinho(catalogo=catalogo, mesa_id=mesa_id)
            self._tocado_em[carrinho_id] = self._relogio()
        logger.info(f"[Carrinho] Carrinho {carrinho_id} criado para mesa_id={mesa_id}")
        return carrinho_id

    def obter(self, carrinho_id: str, catalogo: Optional[IProdutoContract] = None) -> Carrinho:
        """Devolve o carrinho e renova o TTL; ``catalogo`` troca o catálogo usado nas releituras de preço."""
        self.limpar_carrinhos_expirados()
        with self._lock:
            carrinho = self._carrinhos.get(carrinho_id)
            if carrinho is not None:
                self._tocado_em[carrinho_id] = self._relogio()
        if carrinho is None:
            raise CartNotFoundError(carrinho_id)
        if catalogo is not None:
            carrinho.catalogo = catalogo
        return carrinho

    def descartar(self, carrinho_id: str) -> None:
        with self._lock:
            carrinho = self._carrinhos.pop(carrinho_id, None)
            self._tocado_em.pop(carrinho_id, None)
        if carrinho is None:
            raise CartNotFoundError(carrinho_id)
        logger.info(f"[Carrinho] Carrinho {carrinho_id} descartado ({len(carrinho)} itens)")

    def __len__(self) -> int:
        with self._lock:
            return len(self._carrinhos)


carrinhos = CarrinhoRegistry()
