from sqlalchemy import create_engine, text, Engine
from sqlalchemy.orm import sessionmaker, declarative_base

# Base class: Sare models (tables) isse inherit karenge
Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """
    Build the engine once at startup. SQLite needs check_same_thread off
    because count and fetch run on worker threads.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def make_session_factory(engine: Engine) -> sessionmaker:
    # SessionLocal: Har query ke liye alag database session banayega
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def ping(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))

