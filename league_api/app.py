import logging
from contextlib import asynccontextmanager

import asyncpg
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from league_api import config, database
from league_api.errors import LeagueError
from league_api.middleware import SecurityHeadersMiddleware
from league_api.routes import (
    auth_router,
    join_requests_router,
    player_router,
    players_router,
    qr_router,
    teams_router
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    pool = await asyncpg.create_pool(config.DATABASE_URL)
    database.set_db_pool(pool)
    await database.inspect_schema(pool)
    logger.info("Database pool ready (%s)", config.DATABASE_URL.split("@")[-1])

    yield

    # Shutdown
    database.set_db_pool(None)
    await pool.close()


app = FastAPI(title="Flag Football League", lifespan=lifespan)

app.add_middleware(SecurityHeadersMiddleware)

# CORS middleware (must be last to apply first)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials="*" not in config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(join_requests_router)
app.include_router(player_router)
app.include_router(players_router)
app.include_router(qr_router)
app.include_router(teams_router)


def envelope_error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers
    )


@app.exception_handler(LeagueError)
async def league_error_handler(request: Request, exc: LeagueError):
    return envelope_error(exc.status_code, exc.message)


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return envelope_error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return envelope_error(400, "Solicitud invalida")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return envelope_error(500, "Error interno del servidor")


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
