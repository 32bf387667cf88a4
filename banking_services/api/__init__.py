"""
Banking Services API Application Factory
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import get_config
from ..exceptions import BankingError
from ..logging_config import setup_logging, log_action
from .dependencies import BankingSystem
from .persons import router as persons_router
from .clients import router as clients_router
from .account_types import router as account_types_router
from .accounts import router as accounts_router
from .movements import router as movements_router


def create_app(system: Optional[BankingSystem] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    config = get_config()
    logger = setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)

    if system is None:
        system = BankingSystem(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await system.startup()
        yield
        await system.shutdown()

    app = FastAPI(
        title="Banking Services API",
        description="Clients, accounts, movements and account statements",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.banking_system = system

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BankingError)
    async def banking_error_handler(request: Request, exc: BankingError):
        log_action(
            logger, "warning" if exc.status_code < 500 else "error", exc.message,
            action=request.method, resource=request.url.path,
            extra={"status": int(exc.status_code)}
        )
        return JSONResponse(status_code=int(exc.status_code), content=exc.to_dict())

    # Include routers
    app.include_router(clients_router, prefix="/clients", tags=["Clients"])
    app.include_router(persons_router, prefix="/persons", tags=["Persons"])
    app.include_router(account_types_router, prefix="/account-types", tags=["Account Types"])
    app.include_router(accounts_router, prefix="/accounts", tags=["Accounts"])
    app.include_router(movements_router, prefix="/movements", tags=["Movements"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "banking_services",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Banking Services API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "clients": "/clients",
                "persons": "/persons",
                "account-types": "/account-types",
                "accounts": "/accounts",
                "movements": "/movements",
                "account-status": "/movements/account-status",
            }
        }

    return app


def run_server(host: str = None, port: int = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    uvicorn.run(
        "banking_services.api:create_app",
        factory=True,
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )
