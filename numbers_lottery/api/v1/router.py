"""Aggregate API v1 router."""

from fastapi import APIRouter

from numbers_lottery.api.v1.endpoints import health, lottery

api_router = APIRouter()

api_router.include_router(lottery.router, prefix="/lottery", tags=["lottery"])
api_router.include_router(health.router, tags=["health"])
