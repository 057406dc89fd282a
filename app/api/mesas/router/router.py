from fastapi import APIRouter

from app.api.mesas.router.admin.router_mesas_admin import router as router_mesas_admin
from app.api.mesas.router.admin.router_carrinhos_admin import router as router_carrinhos_admin
from app.api.mesas.router.admin.router_vendas_mesa_admin import router as router_vendas_mesa_admin

api_mesas = APIRouter(
    tags=["API - Mesas"]
)

api_mesas.include_router(router_mesas_admin)
api_mesas.include_router(router_carrinhos_admin)
api_mesas.include_router(router_vendas_mesa_admin)
