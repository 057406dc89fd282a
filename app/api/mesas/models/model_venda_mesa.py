# app/api/mesas/models/model_venda_mesa.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Numeric,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator, String as SATypeString
import enum

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class StatusVendaMesa(str, enum.Enum):
    """Status de uma venda por mesa (o ciclo após a abertura não é tratado aqui)."""
    ABERTA = "open"

    @classmethod
    def _missing_(cls, value):
        if value is None:
            return None
        alias_map = {"open": cls.ABERTA, "aberta": cls.ABERTA}
        return alias_map.get(str(value).lower().strip(), None)


class TipoPagamento(str, enum.Enum):
    DINHEIRO = "cash"
    PIX = "pix"
    CARTAO_CREDITO = "credit_card"
    CARTAO_DEBITO = "debit_card"
    VOUCHER = "voucher"
    MISTO = "mixed"

    @classmethod
    def _missing_(cls, value):
        if value is None:
            return None
        normalized = str(value).lower().strip()
        alias_map = {
            "dinheiro": cls.DINHEIRO,
            "cartao_credito": cls.CARTAO_CREDITO,
            "cartao_debito": cls.CARTAO_DEBITO,
            "misto": cls.MISTO,
        }
        for membro in cls:
            alias_map[membro.value] = membro
        return alias_map.get(normalized, None)


class EnumValorType(TypeDecorator):
    """Grava o `.value` de um enum str e devolve o membro na leitura."""

    impl = SATypeString(20)
    cache_ok = True

    def __init__(self, enum_cls, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_cls = enum_cls

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        membro = self.enum_cls(value)
        return membro.value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.enum_cls(value)


class VendaMesaModel(Base):
    __tablename__ = "vendas_mesa"
    __table_args__ = (
        Index("idx_vendas_mesa_mesa", "mesa_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    mesa_id = Column(Integer, ForeignKey("mesas.id", ondelete="RESTRICT"), nullable=False)

    operador_nome = Column(String(100), nullable=False)
    cliente_nome = Column(String(100), nullable=True)
    num_pessoas = Column(Integer, nullable=False, default=1)

    # Valores
    subtotal = Column(Numeric(18, 2), nullable=False, default=0)
    valor_desconto = Column(Numeric(18, 2), nullable=False, default=0)
    valor_total = Column(Numeric(18, 2), nullable=False, default=0)
    tipo_pagamento = Column(EnumValorType(TipoPagamento), nullable=False, default=TipoPagamento.DINHEIRO)
    valor_troco = Column(Numeric(18, 2), nullable=False, default=0)

    status = Column(EnumValorType(StatusVendaMesa), nullable=False, default=StatusVendaMesa.ABERTA)
    observacoes = Column(String(500), nullable=True)

    # Timestamps
    aberta_em = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)

    # Itens pertencem exclusivamente à venda
    itens = relationship("VendaMesaItemModel", back_populates="venda", cascade="all, delete-orphan")


class VendaMesaItemModel(Base):
    __tablename__ = "vendas_mesa_itens"
    __table_args__ = (
        Index("idx_vendas_mesa_itens_venda", "venda_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    venda_id = Column(Integer, ForeignKey("vendas_mesa.id", ondelete="CASCADE"), nullable=False)
    venda = relationship("VendaMesaModel", back_populates="itens")

    # Snapshot do item no momento da venda
    produto_codigo = Column(String(50), nullable=False)
    produto_nome = Column(String(255), nullable=False)
    quantidade = Column(Integer, nullable=False, default=1)
    peso_gramas = Column(Numeric(18, 3), nullable=True)
    preco_unitario = Column(Numeric(18, 2), nullable=True)
    preco_por_grama = Column(Numeric(18, 6), nullable=True)
    valor_desconto = Column(Numeric(18, 2), nullable=False, default=0)
    subtotal = Column(Numeric(18, 2), nullable=False, default=0)
    observacao = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
