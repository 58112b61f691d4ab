from fastapi import APIRouter
from gallery.api.v1.routes import auth
from .accounts import router as accounts_router
from .media import router as media_router


api_router = APIRouter()

api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(accounts_router)
api_router.include_router(media_router)
