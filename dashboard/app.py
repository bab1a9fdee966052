#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitLife Dashboard - FastAPI Application
Только чтение: аналитика привычек, годовые цели, история заметок

Версия: 1.0.0
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import config
from core.models import ValidationError
from dashboard.api import analytics, reflection
from dashboard.dependencies import init_service_manager, shutdown_service_manager
from dashboard.schemas import HealthCheck
from database import EntryStore, HabitNotFoundError, StoreError

logger = logging.getLogger(__name__)


def create_app(store: Optional[EntryStore] = None) -> FastAPI:
    """Сборка приложения; store передается в тестах"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Запуск HabitLife Dashboard...")
        app.state.started_at = time.time()
        init_service_manager(store)
        logger.info(f"🌐 Dashboard доступен на: http://{config.DASHBOARD_HOST}:{config.DASHBOARD_PORT}")
        yield
        logger.info("🛑 Остановка Dashboard...")
        await shutdown_service_manager()
        logger.info("✅ Ресурсы очищены")

    app = FastAPI(
        title="HabitLife Dashboard",
        description="Аналитика привычек, годовые цели и рефлексия",
        version=config.VERSION,
        docs_url="/api/docs" if config.DEBUG else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if config.DEBUG else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(f"{request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")
        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        return response

    # ===== ОБРАБОТЧИКИ ОШИБОК =====

    @app.exception_handler(HabitNotFoundError)
    async def habit_not_found_handler(request: Request, exc: HabitNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(f"❌ Ошибка хранилища на {request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"detail": "Хранилище недоступно"})

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    # ===== МАРШРУТЫ =====

    app.include_router(analytics.router)
    app.include_router(reflection.router)

    @app.get("/api/health", response_model=HealthCheck)
    async def health_check():
        return HealthCheck(
            status="healthy",
            service=config.APP_NAME,
            version=config.VERSION,
            timestamp=time.time(),
        )

    return app


app = create_app()


def run_dashboard(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Запуск дашборда через uvicorn"""
    uvicorn.run(
        "dashboard.app:app",
        host=host or config.DASHBOARD_HOST,
        port=port or config.DASHBOARD_PORT,
        reload=config.DEBUG,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run_dashboard()
