import logging

from fastapi import FastAPI

from app.api_routers.functions import api_router
from app.platform.config import get_settings
from app.platform.cors import CORSMiddleware
from app.platform.exceptions import add_exception_handlers

# Configure logging to show INFO level messages
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    description="Admin PIN login and order notification functions for the PureBreed Pork storefront",
    version="1.0.0",
)


# Root endpoint for basic info
@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": settings.APP_NAME,
        "description": "Backend functions for the PureBreed Pork farm storefront.",
        "version": "1.0.0",
        "docs_url": "/docs",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(api_router)
