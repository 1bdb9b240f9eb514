from contextlib import asynccontextmanager

from fastapi import FastAPI
from .api import health, subscriptions, webhooks
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .services.events import shutdown_alert_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    yield
    await shutdown_alert_service()


# Create FastAPI app
app = FastAPI(
    title="On-chain Alerts API",
    description="Email alerts for activity on watched EVM addresses",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(subscriptions.router, tags=["Subscriptions"])
app.include_router(webhooks.router, tags=["Webhooks"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "On-chain Alerts API",
        "version": "0.1.0",
        "description": "Email alerts for activity on watched EVM addresses",
        "subscribe": "/subscribe",
        "webhook": "/webhook/evm",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
