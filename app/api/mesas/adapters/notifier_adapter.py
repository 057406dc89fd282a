from app.api.mesas.contracts.notifier_contract import INotifierContract, TipoNotificacao
from app.utils.logger import logger


class LogNotifierAdapter(INotifierContract):
    """Encaminha os avisos para o log da aplicação."""

    def notify(self, kind: TipoNotificacao, message: str) -> None:
        if TipoNotificacao(kind) is TipoNotificacao.FALHA:
            logger.warning(f"[Notificação] {message}")
        else:
            logger.info(f"[Notificação] {message}")
