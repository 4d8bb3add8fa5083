from fastapi import APIRouter, Depends

from jeffy_api.middleware.auth import require_admin
from jeffy_api.routers.admin import (
    accounting,
    analytics,
    deliveries,
    distributors,
    franchises,
    orders,
    pricing,
    procurement,
    product_requests,
    products,
    referrals,
    reorders,
    shipments,
    stock_orders,
    users,
    wants,
)

admin_router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])

admin_router.include_router(products.router)
admin_router.include_router(orders.router)
admin_router.include_router(deliveries.router)
admin_router.include_router(accounting.router)
admin_router.include_router(pricing.router)
admin_router.include_router(analytics.router)
admin_router.include_router(distributors.router)
admin_router.include_router(shipments.router)
admin_router.include_router(procurement.router)
admin_router.include_router(stock_orders.router)
admin_router.include_router(franchises.router)
admin_router.include_router(users.router)
admin_router.include_router(referrals.router)
admin_router.include_router(reorders.router)
admin_router.include_router(product_requests.router)
admin_router.include_router(wants.router)
