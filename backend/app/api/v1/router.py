"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import (
    auth, users, parcels, dashboard, notifications, chat, admin
)

router = APIRouter()

# Authentication
router.include_router(auth.router)

# User management (admin)
router.include_router(users.router)

# Parcels
router.include_router(parcels.router)

# Dashboard
router.include_router(dashboard.router)

# Notifications
router.include_router(notifications.router)
router.include_router(notifications.admin_router)

# Support chat
router.include_router(chat.router)

# Audit trail (admin)
router.include_router(admin.router)
