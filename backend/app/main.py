"""
Ponto de entrada da aplicação FastAPI.

Este módulo configura a aplicação FastAPI, inclui rotas e define
handlers de ciclo de vida (startup/shutdown).
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.v1.router import api_router
from app.core.config import get_settings
from app.core.exceptions import LibraryError
from app.core.logging import setup_logging, get_logger
from app.core.scheduler import PeriodicJob
from app.db.session import check_database_connection, engine
from app.db.redis import init_redis, close_redis, check_redis_connection
from app.schemas.health import HealthResponse
from app.services.overdue_sweep import OverdueSweepService

settings = get_settings()
logger = get_logger(__name__)


def build_overdue_sweep_job() -> PeriodicJob:
    """Job que roda a varredura de atrasos a cada OVERDUE_SWEEP_INTERVAL_SECONDS."""
    service = OverdueSweepService()
    return PeriodicJob(
        name="overdue-sweep",
        func=service.process_overdue_fines,
        interval_seconds=settings.OVERDUE_SWEEP_INTERVAL_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gerencia o ciclo de vida da aplicação.

    Startup:
        - Configura logging
        - Conecta ao Redis (fila de notificações)
        - Verifica conexão com PostgreSQL
        - Inicia o job de multas por atraso

    Shutdown:
        - Para o job (aguarda o empréstimo em andamento)
        - Fecha conexão com Redis
        - Fecha pool de conexões do banco
    """
    # Startup
    setup_logging()
    logger.info(f"Iniciando {settings.APP_NAME} em ambiente {settings.ENVIRONMENT}")

    # Inicializa Redis
    try:
        await init_redis()
        if await check_redis_connection():
            logger.info("Conexão com Redis estabelecida")
        else:
            logger.warning("Redis não disponível - notificações ficarão pendentes")
    except Exception as e:
        logger.warning(f"Falha ao conectar ao Redis: {e}")

    # Verifica PostgreSQL
    database_ok = False
    try:
        database_ok, error = await check_database_connection()
        if database_ok:
            logger.info("Conexão com PostgreSQL estabelecida")
        else:
            logger.warning(f"PostgreSQL não disponível: {error}")
    except Exception as e:
        logger.warning(f"Falha ao conectar ao PostgreSQL: {e}")

    sweep_job = None
    if settings.OVERDUE_SWEEP_ENABLED and database_ok:
        sweep_job = build_overdue_sweep_job()
        sweep_job.start()
    app.state.overdue_sweep_job = sweep_job

    yield

    # Shutdown
    logger.info(f"Encerrando {settings.APP_NAME}")
    if sweep_job is not None:
        await sweep_job.stop()
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="API de multas e atrasos para sistema de biblioteca",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError) -> JSONResponse:
    """Inclui o `code` do erro de negócio na resposta."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
    )


# Inclui rotas da API v1
app.include_router(api_router)


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Verifica status da aplicação",
    description="Retorna o status atual da aplicação e informações básicas do ambiente.",
)
async def health_check(request: Request) -> HealthResponse:
    """
    Endpoint de healthcheck para monitoramento.

    Retorna status da aplicação, nome, ambiente e se o job de multas está ativo.
    """
    job = getattr(request.app.state, "overdue_sweep_job", None)
    return HealthResponse(
        status="healthy",
        app_name=settings.APP_NAME,
        environment=settings.ENVIRONMENT,
        overdue_sweep_running=job is not None and job.is_running,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
