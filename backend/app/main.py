import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import customers
from app.api.errors import register_exception_handlers
from app.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Quản lý khách hàng đa kênh cho cửa hàng",
    version=settings.VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(customers.router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": settings.VERSION}
