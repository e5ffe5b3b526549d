from fastapi import APIRouter

from .endpoints import relay

api_router = APIRouter()

# Relay (catch-all, no prefix)
api_router.include_router(relay.router, prefix="", tags=["relay"])
