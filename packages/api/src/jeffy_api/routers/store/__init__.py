from fastapi import APIRouter

from jeffy_api.routers.store import (
    account,
    catalog,
    maps,
    orders,
    product_requests,
    promotions,
    search,
    wants,
)

store_router = APIRouter(prefix="/api")

store_router.include_router(catalog.router)
store_router.include_router(search.router)
store_router.include_router(orders.router)
store_router.include_router(promotions.router)
store_router.include_router(account.router)
store_router.include_router(maps.router)
store_router.include_router(product_requests.router)
store_router.include_router(wants.router)
