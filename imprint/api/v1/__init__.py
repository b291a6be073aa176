"""V1 API router aggregation."""

from fastapi import APIRouter

from imprint.api.v1.tenants import router as tenants_router
from imprint.api.v1.users import router as users_router
from imprint.api.v1.webhooks import router as webhooks_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(tenants_router)
v1_router.include_router(users_router)
v1_router.include_router(webhooks_router)
