import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from pharmaworld.api import advertisements, auth, cart, categories, medicines, orders, payments, users
from pharmaworld.core.config import APP_NAME, Settings, get_settings
from pharmaworld.core.errors import register_exception_handlers
from pharmaworld.db.mongo import Database
from pharmaworld.services.payments import PaymentGateway

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    payment_gateway: Optional[PaymentGateway] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_db = database is None
        db = database or Database.connect(settings.mongo_uri, settings.db_name)
        if db.ping():
            logger.info("Pinged your deployment. Connected to MongoDB database %s", db.name)
        db.ensure_indexes()
        app.state.db = db
        try:
            yield
        finally:
            if owns_db:
                db.close()

    app = FastAPI(title=APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.payments = payment_gateway or PaymentGateway(
        settings.stripe_secret_key,
        currency=settings.stripe_currency,
        api_base=settings.stripe_api_base,
    )
    if database is not None:
        app.state.db = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(auth.router, tags=["auth"])
    app.include_router(users.router, tags=["users"])
    app.include_router(medicines.router, tags=["medicines"])
    app.include_router(categories.router, tags=["categories"])
    app.include_router(cart.router, tags=["cart"])
    app.include_router(advertisements.router, tags=["advertisements"])
    app.include_router(orders.router, tags=["orders"])
    app.include_router(payments.router, tags=["payments"])

    @app.get("/")
    def root():
        return {"message": "Hello from Medicine Selling Server.."}

    @app.get("/health")
    def health(request: Request):
        db = request.app.state.db
        connected = db.ping()
        return {
            "backend": "running",
            "database": "connected" if connected else "unavailable",
            "database_name": db.name,
        }

    return app


def run():
    import uvicorn

    settings = get_settings()
    uvicorn.run("pharmaworld.main:create_app", factory=True, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
