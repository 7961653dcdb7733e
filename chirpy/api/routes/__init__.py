"""API router configuration."""

from fastapi import APIRouter

from chirpy.api.routes import admin, auth, chirps, users, webhooks

api_router = APIRouter()

api_router.include_router(auth.router, tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(chirps.router, prefix="/chirps", tags=["chirps"])
api_router.include_router(webhooks.router, tags=["webhooks"])

# Mounted at the application root, outside the API prefix
admin_router = APIRouter()
admin_router.include_router(admin.router, prefix="/admin", tags=["admin"])
