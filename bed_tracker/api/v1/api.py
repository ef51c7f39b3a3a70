from fastapi import APIRouter
from bed_tracker.api.v1.beds import routes as beds

api_router = APIRouter()
api_router.include_router(beds.router, prefix="/beds")
