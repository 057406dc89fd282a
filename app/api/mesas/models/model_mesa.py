# app/api/mesas/models/model_mesa.py
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Index, text
from sqlalchemy.types import TypeDecorator, String as SATypeString
import enum

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class StatusMesa(str, enum.Enum):
    """Status possíveis para uma mesa"""
    LIVRE = "free"
    OCUPADA = "occupied"
    AGUARDANDO_CONTA = "awaiting_payment"
    LIMPEZA = "cleaning"

    @classmethod
    def _missing_(cls, value):
        if value is None:
            return None
        normalized = str(value).lower().strip()
        alias_map = {
            "free": cls.LIVRE,
            "occupied": cls.OCUPADA,
            "awaiting_payment": cls.AGUARDANDO_CONTA,
            "cleaning": cls.LIMPEZA,
            "livre": cls.LIVRE,
            "ocupada": cls.OCUPADA,
            "aguardando_conta": cls.AGUARDANDO_CONTA,
            "limpeza": cls.LIMPEZA,
        }
        return alias_map.get(normalized, None)

    @property
    def descricao(self) -> str:
        return STATUS_DESCRICAO[self]


STATUS_DESCRICAO = {
    StatusMesa.LIVRE: "Livre",
    StatusMesa.OCUPADA: "Ocupada",
    StatusMesa.AGUARDANDO_CONTA: "Aguardando Conta",
    StatusMesa.LIMPEZA: "Limpeza",
}


class StatusMesaType(TypeDecorator):
    """TypeDecorator para aceitar valores legados (pt-BR) de status."""

    impl = SATypeString(20)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None

        if isinstance(value, StatusMesa):
            return value.value

        alias = StatusMesa._missing_(value)
        if alias is None:
            raise ValueError(f"Status de mesa inválido: {value}")
        return alias.value

    def process_result_value(self, value, dialect):
        if value is None:
            return None

        alias = StatusMesa._missing_(value)
        if alias is None:
            raise LookupError(
                f"Valor de status de mesa desconhecido no banco: {value}"
            )
        return alias


class MesaModel(Base):
    __tablename__ = "mesas"
    __table_args__ = (
        Index("uq_mesa_numero_ativa", "numero", unique=True,
              postgresql_where=text("ativa"), sqlite_where=text("ativa")),
    )

    id = Column(Integer, primary_key=True)
    # Número único só entre mesas ativas (índice parcial)
    numero = Column(Integer, nullable=False)
    nome = Column(String(100), nullable=False)
    capacidade = Column(Integer, nullable=False, default=4)
    status = Column(StatusMesaType(), nullable=False, default=StatusMesa.LIVRE)
    localizacao = Column(String(100), nullable=True)
    ativa = Column(Boolean, nullable=False, default=True)

    venda_atual_id = Column(
        Integer,
        ForeignKey("vendas_mesa.id", ondelete="SET NULL", use_alter=True, name="fk_mesa_venda_atual"),
        nullable=True,
    )

    created_at = Column(DateTime, default=now_trimmed, nullable=False)
    updated_at = Column(DateTime, default=now_trimmed, onupdate=now_trimmed, nullable=False)
