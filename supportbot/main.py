import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import supportbot.config.config as configs
from supportbot.api.v1.route import api_router as MainRouter
from supportbot.db.errors import NotInitialized, StorageError
from supportbot.db.storage import Storage
from supportbot.service.context.knowledge import load_context

logging.basicConfig(
    level=configs.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="supportbot", version="0.1.0")
app.state.storage = Storage()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if configs.APP_ENV == "production" else configs.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router=MainRouter, prefix="/api/v1")


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    if isinstance(exc, NotInitialized):
        logger.error("Storage used before initialization on %s", request.url.path)
    else:
        logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "message": "Something went wrong"})


@app.on_event("startup")
def startup() -> None:
    # StorageUnavailable here stops the server
    app.state.storage.initialize(
        configs.DATABASE_URL,
        configs.SQLITE_PATH,
        pool_size=configs.DB_POOL_SIZE,
        pool_recycle=configs.DB_POOL_RECYCLE,
        pool_timeout=configs.DB_POOL_TIMEOUT,
        ssl=configs.DB_SSL,
    )
    load_context()
    logger.info("supportbot running (env=%s, database=%s)", configs.APP_ENV, app.state.storage.backend_type)


@app.on_event("shutdown")
def shutdown() -> None:
    app.state.storage.dispose()
