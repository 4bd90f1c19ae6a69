"""API router."""
from fastapi import APIRouter

from tracker.api import rpc

api_router = APIRouter()

api_router.include_router(rpc.router)
