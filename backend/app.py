import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.routes import router
from backend import sessions, storage
from cluequest import AdventureConfigError, InvalidStateError, NotFoundError

load_dotenv(Path(__file__).parent.parent / ".env")

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


def create_app(data_dir: Path | None = None) -> FastAPI:
    resolved = data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    storage.init_storage(resolved)
    sessions.reset()

    app = FastAPI(title="ClueQuest")
    app.include_router(router, prefix="/api")

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InvalidStateError)
    async def invalid_state(request: Request, exc: InvalidStateError):
        logger.debug("rejected %s %s: %s", request.method, request.url.path, exc.reason)
        return JSONResponse(status_code=409, content={"detail": exc.to_dict()})

    @app.exception_handler(AdventureConfigError)
    async def bad_adventure(request: Request, exc: AdventureConfigError):
        return JSONResponse(status_code=422, content={"detail": exc.problems})

    return app


# Default app instance for uvicorn (uses DATA_DIR env var or default)
app = create_app()
