import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import config
from .database import Database, create_database
from .domain.appointments import router as appointments_router
from .domain.newsletter import router as newsletter_router
from .domain.store import router as store_router
from .domain.store.stripe_service import PaymentGateway, create_payment_gateway
from .email_service import EmailSender, create_email_sender
from .routes import admin_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("stripe").setLevel(logging.WARNING)

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")


def create_app(
    database: Optional[Database] = None,
    email_sender: Optional[EmailSender] = None,
    payment_gateway: Optional[PaymentGateway] = None,
) -> FastAPI:
    """
    Build the API. Collaborators left as None are created from configuration
    when the application starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting up...")
        app.state.database = database or create_database(config.DATABASE_URL)
        try:
            app.state.database.create_tables()
            logger.info("Database tables created successfully")
        except SQLAlchemyError as e:
            logger.error(f"Failed to create database tables: {e}")
            raise
        app.state.email_sender = email_sender or create_email_sender()
        app.state.payment_gateway = payment_gateway or create_payment_gateway()

        yield

        logger.info("Application shutting down...")
        app.state.database.dispose()

    app = FastAPI(title="Valentino Tree API", version="1.0.0", lifespan=lifespan)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies are reported as 400s, like service validation errors"""
        logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
        fields = ", ".join(str(err.get("loc", ["?"])[-1]) for err in exc.errors())
        return JSONResponse(status_code=400, content={"detail": f"Invalid request: {fields}"})

    @app.exception_handler(SQLAlchemyError)
    async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"{request.method} {request.url.path} - Storage error: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
            raise

    logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    api = APIRouter(prefix="/api")

    @api.get("/health")
    def health():
        return {"status": "ok", "message": "Server is running"}

    api.include_router(appointments_router)
    api.include_router(admin_router)
    api.include_router(newsletter_router)
    api.include_router(store_router)
    app.include_router(api)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 5000))
    uvicorn.run(app, host="0.0.0.0", port=port)
