from abc import ABC, abstractmethod
from enum import Enum


class TipoNotificacao(str, Enum):
    SUCESSO = "success"
    FALHA = "failure"


class INotifierContract(ABC):
    """Aviso fire-and-forget para a interface; falhas do notificador são ignoradas por quem chama."""

    @abstractmethod
    def notify(self, kind: TipoNotificacao, message: str) -> None:
        raise NotImplementedError
