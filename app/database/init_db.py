import logging

from .db_connection import engine, Base

logger = logging.getLogger(__name__)


def importar_models():
    # ─── Models Catálogo ─────────────────────────────────────────────
    from app.api.catalogo.models.model_produto import ProdutoModel
    # ─── Models Mesas ────────────────────────────────────────────────
    from app.api.mesas.models.model_mesa import MesaModel
    from app.api.mesas.models.model_venda_mesa import VendaMesaModel, VendaMesaItemModel
    logger.info("📦 Models importados com sucesso.")


def criar_tabelas():
    """
    Importa os modelos para garantir que estejam registrados no Base
    e cria as tabelas que ainda não existem (checkfirst).
    """
    logger.info("📦 Importando modelos para registro no Base...")
    importar_models()

    all_tables = list(Base.metadata.tables.values())
    logger.info(f"📊 Total de tabelas encontradas: {len(all_tables)}")
    for table in all_tables:
        logger.info(f"  - {table.name}")

    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("✅ Tabelas criadas/verificadas.")


def inicializar_banco():
    logger.info("🚀 Iniciando processo de inicialização do banco de dados...")
    criar_tabelas()
    logger.info("✅ Banco de dados inicializado.")
