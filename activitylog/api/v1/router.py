"""
Aggregates all v1 API routers into a single APIRouter.
"""
from __future__ import annotations

from fastapi import APIRouter

from activitylog.api.v1 import activity, auth, revisions

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(activity.router)
api_router.include_router(revisions.router)
