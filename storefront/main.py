from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy import text
import logging
import os

from .api.checkout import router as checkout_router
from .api.orders import router as orders_router
from .api.quotes import router as quotes_router
from .database import Base, engine
from .errors import StorefrontError
from . import models  # noqa: F401  (registers the tables on Base.metadata)

logger = logging.getLogger("uvicorn.error")  # shows up in the uvicorn console

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- startup ---
    try:
        Base.metadata.create_all(bind=engine)
        with engine.connect() as con:
            con.execute(text("SELECT 1"))
        logger.info("DB connectivity OK (startup)")
    except Exception as e:
        logger.error("DB connectivity FAILED (startup): %s", e, exc_info=True)
    yield
    # --- shutdown ---
    engine.dispose()


app = FastAPI(
    title="Storefront API",
    version="0.1.0",
    lifespan=lifespan,
)
app.include_router(checkout_router)
app.include_router(orders_router)
app.include_router(quotes_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.title, "detail": exc.public_detail},
    )


@app.get("/health/db")
def health_db():
    """Health check: SELECT 1 against the database."""
    try:
        with engine.connect() as con:
            con.execute(text("SELECT 1"))
        return {"db": "ok"}
    except Exception as e:
        logger.error("DB health check failed: %s", e)
        raise HTTPException(status_code=503, detail="db not ok")


@app.get("/")
def root():
    return {"status": "ok"}
