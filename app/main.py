import os
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.config.settings import CORS_ORIGINS, CORS_ALLOW_ALL, BASE_URL as SETTINGS_BASE_URL, ENABLE_DOCS
from app.core.exception_handlers import (
    validation_exception_handler,
    mesa_domain_exception_handler,
    http_exception_handler,
    general_exception_handler,
)
from app.api.mesas.core.exceptions import MesaDomainError
from app.database.init_db import importar_models, inicializar_banco
from app.utils.logger import logger

# Models registrados no Base antes dos routers
importar_models()

from app.api.mesas.router.router import api_mesas  # noqa: E402
from app.api.catalogo.router.router import router as catalogo_router  # noqa: E402

BASE_URL = SETTINGS_BASE_URL or os.getenv("BASE_URL", "http://localhost:8000")

app = FastAPI(
    title="API de Vendas por Mesa",
    version="1.0.0",
    description="Cadastro e status de mesas, carrinho do pedido e vendas do salão",
    docs_url=("/swagger" if ENABLE_DOCS else None),
    redoc_url=("/redoc" if ENABLE_DOCS else None),
    openapi_url=("/openapi.json" if ENABLE_DOCS else None),
    servers=[{"url": BASE_URL, "description": "Base URL do ambiente"}],
    redirect_slashes=False,
)

# ─── Erros ──────────────────────────────────────────────────────────
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(MesaDomainError, mesa_domain_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)


# ─── CORS ───────────────────────────────────────────────────────────
def configurar_cors(application: FastAPI) -> None:
    """CORS_ALLOW_ALL libera tudo sem credenciais; origens explícitas liberam credenciais."""
    if CORS_ALLOW_ALL or not CORS_ORIGINS:
        origens, credenciais = ["*"], False
    else:
        origens, credenciais = CORS_ORIGINS, True
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origens,
        allow_credentials=credenciais,
        allow_methods=["*"],
        allow_headers=["*"],
    )


configurar_cors(app)


# ─── Ciclo de vida ──────────────────────────────────────────────────
@app.on_event("startup")
def startup():
    logger.info("Iniciando API de vendas por mesa...")
    inicializar_banco()
    logger.info("API iniciada com sucesso.")


@app.get("/")
async def root():
    return {"status": "ok", "message": "API is running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


# ─── Routers ────────────────────────────────────────────────────────
app.include_router(api_mesas)
app.include_router(catalogo_router)
