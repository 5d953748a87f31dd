from fastapi import APIRouter
from app.api.routes import genetics, biometrics

api_router = APIRouter()

api_router.include_router(genetics.router, prefix="/genetics", tags=["Genetics"])
api_router.include_router(biometrics.router, prefix="/biometrics", tags=["Biometrics"])
