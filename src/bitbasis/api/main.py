import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from bitbasis.api.lots import router as lots_router
from bitbasis.api.portfolio import router as portfolio_router
from bitbasis.api.reports import router as reports_router
from bitbasis.api.tax import router as tax_router
from bitbasis.container import Container
from bitbasis.exceptions import (
    BitBasisError,
    ExternalServiceError,
    InsufficientBasis,
    InvalidDisposal,
    InvalidLot,
    InvalidPrice,
    InvalidRate,
    LedgerConflict,
    LotNotFound,
)

logger = logging.getLogger("bitbasis.api")

# Checked in order; first isinstance match wins
ERROR_STATUS: list[tuple[type[BitBasisError], int]] = [
    (InvalidLot, 422),
    (InvalidDisposal, 422),
    (InvalidRate, 422),
    (InvalidPrice, 422),
    (InsufficientBasis, 409),
    (LedgerConflict, 409),
    (LotNotFound, 404),
    (ExternalServiceError, 502),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    yield
    engine = container.engine()
    await engine.dispose()


app = FastAPI(title="BitBasis", version="0.1.0", lifespan=lifespan)


@app.exception_handler(BitBasisError)
async def domain_error_handler(request: Request, exc: BitBasisError):
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
            return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": type(exc).__name__})
    # InsufficientLotQuantity and anything unmapped is a defect
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Ledger defect on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": str(exc), "error": type(exc).__name__})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(lots_router)
app.include_router(tax_router)
app.include_router(portfolio_router)
app.include_router(reports_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
