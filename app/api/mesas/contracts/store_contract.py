from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional


class EntityKind(str, Enum):
    MESA = "mesa"
    VENDA = "venda"
    VENDA_ITEM = "venda_item"


Record = Dict[str, Any]


class IStoreContract(ABC):
    """Contrato do armazenamento de linhas usado pelas vendas por mesa.

    Toda falha de infraestrutura deve ser levantada como ``StoreError``.
    """

    @abstractmethod
    def insert(self, kind: EntityKind, record: Record) -> Record:
        """Grava o registro e devolve-o com o id gerado; unicidade violada levanta ``StoreConflictError``."""
        raise NotImplementedError

    @abstractmethod
    def update(
        self,
        kind: EntityKind,
        record_id: int,
        patch: Record,
        *,
        expected: Optional[Record] = None,
    ) -> Record:
        """Aplica o patch e devolve o registro atualizado.

        Com ``expected``, a escrita só acontece se os campos informados ainda
        tiverem esses valores no momento da gravação; caso contrário levanta
        ``StoreConflictError`` sem alterar nada. Violações de unicidade também
        viram ``StoreConflictError``.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, kind: EntityKind, record_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def query(
        self,
        kind: EntityKind,
        filtro: Optional[Record] = None,
        *,
        for_update: bool = False,
    ) -> List[Record]:
        """Busca por igualdade dos campos do filtro, ordenado por id."""
        raise NotImplementedError

    def get(self, kind: EntityKind, record_id: int, *, for_update: bool = False) -> Optional[Record]:
        rows = self.query(kind, {"id": record_id}, for_update=for_update)
        return rows[0] if rows else None
