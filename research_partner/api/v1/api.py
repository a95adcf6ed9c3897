"""API v1 router aggregation"""
from fastapi import APIRouter
from research_partner.api.v1.endpoints import auth_endpoints

api_router = APIRouter()

api_router.include_router(auth_endpoints.router, prefix="/auth", tags=["Authentication"])
