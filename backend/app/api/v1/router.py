"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import auth, wallet

router = APIRouter()

# Registration and login
router.include_router(auth.router)

# Balance, transfers and history
router.include_router(wallet.router)
