from fastapi import APIRouter
from app.api.catalogo.router import router_produtos

router = APIRouter()

router.include_router(router_produtos.router)
