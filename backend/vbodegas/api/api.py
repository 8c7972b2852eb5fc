# File: backend/vbodegas/api/api.py
from fastapi import APIRouter

from vbodegas.api.endpoints import contracts

api_router = APIRouter(prefix="/api")
api_router.include_router(contracts.router, prefix="/admin", tags=["contratos"])
