# app/routes/__init__.py
from fastapi import APIRouter
from app.routes.auth import auth, users
from app.routes.trip import trip_routes, collaboration
from app.routes.expense import settlement


api_router = APIRouter()


# Auth routes
api_router.include_router(auth.router)
api_router.include_router(users.router)

# Trip routes
api_router.include_router(trip_routes.router)
api_router.include_router(collaboration.router)

# Settlement routes
api_router.include_router(settlement.router)
