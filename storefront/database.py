# storefront/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from dotenv import load_dotenv
import os

# load .env
load_dotenv()

DB_URL = os.getenv("DB_URL")
if not DB_URL:
    raise RuntimeError("Environment variable DB_URL is not set. Check your '.env'.")

# CA bundle for TLS connections to a managed MySQL server
DB_SSL_CA = os.getenv("DB_SSL_CA")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        # FastAPI runs sync routes on a threadpool
        return {"check_same_thread": False}
    if DB_SSL_CA:
        return {"ssl": {"ca": DB_SSL_CA}}
    return {}


# engine (pool_pre_ping recovers dropped connections)
engine = create_engine(
    DB_URL,
    pool_pre_ping=True,
    echo=DB_ECHO,
    connect_args=_connect_args(DB_URL),
    future=True,
)

# session factory
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


# every model inherits from this
class Base(DeclarativeBase):
    pass


# FastAPI dependency: one session (one pooled connection) per request, always closed
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
