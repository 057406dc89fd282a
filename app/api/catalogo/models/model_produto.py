from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric, func
from app.database.db_connection import Base


class ProdutoModel(Base):
    __tablename__ = "produtos"

    # PK técnica (estável). `codigo` é o atributo de negócio.
    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo = Column(String(50), unique=True, index=True, nullable=False)
    nome = Column(String(255), nullable=False)

    # Produtos pesáveis usam preco_por_grama; os demais, preco_unitario
    pesavel = Column(Boolean, nullable=False, default=False)
    preco_unitario = Column(Numeric(18, 2), nullable=True)
    preco_por_grama = Column(Numeric(18, 6), nullable=True)

    ativo = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
