"""API version 1 routes."""

from fastapi import APIRouter

from pocketbook.api.v1 import accounts, admin, categorization, transactions

router = APIRouter(prefix="/api/v1")

# Include routers
router.include_router(categorization.router)
router.include_router(transactions.router)
router.include_router(accounts.router)
router.include_router(admin.router)
