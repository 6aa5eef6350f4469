"""
Главный файл FastAPI приложения.

Запуск:
    uvicorn todo_app.main:app --reload

API документация:
    http://localhost:8000/docs       - Swagger UI
    http://localhost:8000/redoc      - ReDoc

Все ресурсы доступны по путям /api/...:
    /api/auth/*        - регистрация, вход, выход, текущая сессия (публичные)
    /api/todos         - задачи пользователя (нужна сессия)
    /api/categories    - категории пользователя (нужна сессия)
    /api/hello         - публичная проверка связи
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .api import auth_router, categories_router, todos_router
from .api.errors import error_response, register_error_handlers
from .api.middleware import RequestLoggingMiddleware
from .api.schemas import MessageResponse
from .core.config import settings
from .core.database import AsyncSessionLocal
from .core.logging import get_logger, setup_logging

# LOG_LEVEL: DEBUG/INFO/WARNING/ERROR - что логировать
# LOG_FORMAT: json (production) / simple (development)
setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)

logger = get_logger(__name__)

APP_VERSION = "1.0.0"
APP_START_TIME: float = 0.0  # Will be set on startup

# ============================================================================
# RATE LIMITER SETUP
# ============================================================================

# Группируем запросы по IP адресу клиента
limiter = Limiter(key_func=get_remote_address)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 в едином формате ErrorResponse."""
    logger.warning("Rate limit exceeded", extra={"limit": str(exc.detail)})
    return error_response(
        429,
        "RATE_LIMIT_EXCEEDED",
        f"Too many requests. Limit: {exc.detail}",
        [{"field": "rate_limit", "message": str(exc.detail)}],
    )


# ============================================================================
# LIFESPAN EVENT HANDLER
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup/shutdown: только логирование, схему создаёт alembic или init_db.py."""
    global APP_START_TIME

    APP_START_TIME = time.time()
    logger.info(
        "Application started",
        extra={
            "app_name": settings.APP_NAME,
            "version": APP_VERSION,
            "debug": settings.DEBUG,
            "log_level": settings.LOG_LEVEL,
            "rate_limit": settings.RATE_LIMIT,
        },
    )

    yield

    uptime = int(time.time() - APP_START_TIME)
    logger.info("Application stopped", extra={"uptime_seconds": uptime})


# ============================================================================
# CREATE APPLICATION
# ============================================================================

app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="""
    To-do список с категориями.

    ## Возможности

    * **Задачи** - создание, отметка выполнения, удаление
    * **Категории** - цветные метки пользователя (M:M с задачами)
    * **Сессии** - вход по e-mail/паролю, cookie или Bearer токен

    ## Архитектура

    ```
    API Layer (FastAPI) → Service Layer (Business Logic) → Repository Layer (Database)
    ```

    ## Модель данных

    ```
    User → Tasks ⇄ Categories (M:M через task_categories)
         → Sessions
    ```
    """,
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.state.limiter = limiter
# slowapi handler имеет специфичный тип, но работает корректно
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

# ============================================================================
# MIDDLEWARE
# ============================================================================

# Веб-клиент шлёт cookie сессии, поэтому allow_credentials и явный список origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

# ============================================================================
# ROUTERS
# ============================================================================

api_router = APIRouter(prefix="/api")


@api_router.get("/hello", response_model=MessageResponse, tags=["root"], summary="Проверка связи")
@limiter.limit(settings.RATE_LIMIT)
async def hello(request: Request) -> MessageResponse:
    """Публичный endpoint без авторизации."""
    return MessageResponse(message="Hello from FastAPI + SQLAlchemy + Pydantic!")


api_router.include_router(auth_router)
api_router.include_router(todos_router)
api_router.include_router(categories_router)

app.include_router(api_router)

register_error_handlers(app)


# ============================================================================
# ROOT / HEALTH
# ============================================================================


@app.get("/", tags=["root"], summary="Root endpoint", description="Информация о API")
@limiter.limit(settings.RATE_LIMIT)
async def root(request: Request):
    return {
        "name": settings.APP_NAME,
        "version": APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
        "endpoints": {
            "auth": "/api/auth",
            "todos": "/api/todos",
            "categories": "/api/categories",
            "hello": "/api/hello",
        },
        "rate_limit": settings.RATE_LIMIT,
    }


@app.get(
    "/health", tags=["health"], summary="Health check", description="Проверка работоспособности API"
)
async def health_check(request: Request):
    """
    Проверяет подключение к базе данных.

    200:
    ```json
    {"status": "ok", "checks": {"database": "connected", "version": "1.0.0", "uptime_seconds": 3600}}
    ```

    503: то же самое со `"status": "error"` и `"database": "disconnected"`.
    """
    uptime_seconds = int(time.time() - APP_START_TIME) if APP_START_TIME > 0 else 0

    db_status = "disconnected"
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
            db_status = "connected"
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unavailable", extra={"error": str(e)})

    overall_status = "ok" if db_status == "connected" else "error"
    return JSONResponse(
        status_code=200 if overall_status == "ok" else 503,
        content={
            "status": overall_status,
            "checks": {
                "database": db_status,
                "version": APP_VERSION,
                "uptime_seconds": uptime_seconds,
            },
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )
