"""API V1 Router"""

from fastapi import APIRouter

from billing_service.api.v1.endpoints import bills

api_router = APIRouter()

api_router.include_router(bills.router, prefix="/bills", tags=["Bills"])
