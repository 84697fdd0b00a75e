from fastapi import APIRouter

from app.api.v1.geo_audit import router as geo_audit_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(geo_audit_router)
