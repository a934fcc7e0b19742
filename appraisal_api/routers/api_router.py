from fastapi import APIRouter
from appraisal_api.routers import appraisals, health

# Routers are aggregated here; main.py only imports this hub.
api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(appraisals.router, tags=["Appraisals"])
