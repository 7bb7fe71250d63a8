from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import create_tables
from shared.exceptions import register_exception_handlers
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.auth_service import models as auth_models  # noqa: F401
from services.product_service import models as product_models  # noqa: F401
from services.order_service import models as order_models  # noqa: F401

from services.auth_service.router import router as auth_router
from services.product_service.router import router as product_router
from services.order_service.router import router as order_router


def create_app() -> FastAPI:
    app = FastAPI(
        title="Cafe Ordering API",
        version="1.0.0",
        description="Catalog browsing, order placement with stock reservation, and kitchen order tracking.",
    )

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(app, "cafe_api")

    # --- SECURITY SETUP ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(product_router)
    app.include_router(order_router)

    @app.get("/health", include_in_schema=False)
    async def health_check():
        return {"service": "cafe_api", "status": "running"}

    @app.on_event("startup")
    async def startup_event():
        await create_tables()

    return app


app = create_app()
