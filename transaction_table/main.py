from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from transaction_table.config import Settings
from transaction_table.database import Base, create_db_engine, make_session_factory, ping
from transaction_table.query_resolver import InvalidQueryParameter, TransactionQueryResolver
from transaction_table.schemas import ErrorResponse, TransactionPage

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

router = APIRouter()


def get_resolver(request: Request) -> TransactionQueryResolver:
    return request.app.state.resolver


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


@router.get("/health")
def health_check(engine: Engine = Depends(get_engine)):
    """
    Health check endpoint for load balancers and monitoring tools.
    """
    try:
        ping(engine)
        database_status = "healthy"
    except SQLAlchemyError as e:
        database_status = f"unhealthy: {str(e)}"

    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": VERSION,
        "services": {
            "database": database_status
        }
    }


@router.get(
    "/api/transactions",
    response_model=TransactionPage,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def list_transactions(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    sort_field: Optional[str] = Query(None, alias="sortField"),
    sort_direction: Optional[str] = Query(None, alias="sortDirection"),
    resolver: TransactionQueryResolver = Depends(get_resolver),
):
    """
    Paginated, searchable, sortable listing of transactions.

    Flow:
    1. Coerce raw query values (bad page/limit fall back to defaults)
    2. Build the filter and sort from q, type, sortField, sortDirection
    3. Run fetch and count concurrently against the same filter
    4. Return items plus pagination metadata
    """
    try:
        params = resolver.resolve({
            "page": page,
            "limit": limit,
            "q": q,
            "type": type,
            "sortField": sort_field,
            "sortDirection": sort_direction,
        })
    except InvalidQueryParameter as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return resolver.list_transactions(params)

    except SQLAlchemyError as e:
        logger.error(f"Database error while listing transactions: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    except Exception as e:
        logger.error(f"Unexpected error while listing transactions: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the API. The engine is created here; the resolver and its query
    pool live for one startup/shutdown cycle and reach requests through
    app.state.
    """
    settings = settings or Settings.from_env()

    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    engine = engine or create_db_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.create_tables:
            # Create tables if they don't exist
            Base.metadata.create_all(bind=engine)

        resolver = TransactionQueryResolver(
            make_session_factory(engine),
            max_limit=settings.max_page_limit,
            max_workers=settings.query_workers,
        )
        app.state.resolver = resolver
        yield
        resolver.close()
        engine.dispose()
        logger.info("Query pool and database engine released")

    app = FastAPI(
        title="Transaction Table API",
        version=VERSION,
        description="Paginated, searchable and sortable listing of financial transactions",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_exception)
    app.include_router(router)

    return app


# uvicorn transaction_table.main:app --port 7543
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=7543)
