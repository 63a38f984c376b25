# travelpay/main.py

from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv

# ---------------------------------------------
# LOAD ENVIRONMENT VARIABLES
# ---------------------------------------------
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from travelpay.config import settings
from travelpay.config.settings import validate_settings
from travelpay.deps import build_orchestrator
from travelpay.errors import InvalidBookingDetails, PaymentError
from travelpay.logging_config import get_logger
from travelpay.middleware import request_id_middleware
from travelpay.routers import callbacks, catalog, health, payments
from travelpay.services.idempotency import RedisIdempotencyLedger
from travelpay.services.payment_service import PaymentOrchestrator

logger = get_logger(__name__)


def create_app(orchestrator: Optional[PaymentOrchestrator] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        validate_settings()
        logger.info(
            "app_started",
            environment=settings.ENVIRONMENT,
            methods=[m.method for m in app.state.orchestrator.available_methods()],
        )
        yield
        ledger = app.state.orchestrator.ledger
        if isinstance(ledger, RedisIdempotencyLedger):
            await ledger.close()

    # ---------------------------------------------
    # APP INIT
    # ---------------------------------------------
    app = FastAPI(
        title="Travelpay Booking Payments API",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator or build_orchestrator(settings)

    # ---------------------------------------------
    # MIDDLEWARE
    # ---------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(request_id_middleware)

    # ---------------------------------------------
    # ERRORS
    # ---------------------------------------------
    @app.exception_handler(PaymentError)
    async def payment_error_handler(request: Request, exc: PaymentError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log("payment_error", code=exc.code, error=exc.message, status_code=exc.status_code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "Invalid request")
        logger.warning("request_invalid", code=InvalidBookingDetails.code, error=message, error_count=len(errors))
        return JSONResponse(
            status_code=InvalidBookingDetails.status_code,
            content={"code": InvalidBookingDetails.code, "message": message},
        )

    # ---------------------------------------------
    # ROUTERS
    # ---------------------------------------------
    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(payments.router, tags=["Payments"])
    app.include_router(callbacks.router, tags=["Payment Callbacks"])
    app.include_router(catalog.router, prefix="/catalog", tags=["Catalog"])

    @app.get("/")
    def root():
        return {"message": "Travelpay backend is running"}

    return app


app = create_app()
