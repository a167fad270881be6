# habit_farm/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .api import router
from .core import FarmError, IOFailure, create_db_and_tables, status_code_for
from .core.config import CORS_ORIGINS, DATA_DIR, FRONTEND_DIR, LOGIN_EXPIRY_DAYS
from .game import load_catalog

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("habit_farm")


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    app.state.catalog = load_catalog(DATA_DIR)
    logger.info(
        "Habit Farm ready: %d crops, %d recipes, login valid for %d days",
        len(app.state.catalog.crops), len(app.state.catalog.recipes), LOGIN_EXPIRY_DAYS,
    )
    yield


app = FastAPI(title="Habit Farm", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=CORS_ORIGINS != ["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(router, prefix="/api", tags=["Farm"])


@app.exception_handler(FarmError)
async def farm_error_handler(request: Request, exc: FarmError) -> JSONResponse:
    if isinstance(exc, IOFailure):
        logger.error("Storage failure on %s: %s", request.url.path, exc.__cause__)
    return JSONResponse(status_code=status_code_for(exc), content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request", "code": "VALIDATION_ERROR", "errors": errors},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Something went wrong, please try again", "code": "INTERNAL_ERROR"},
    )


if FRONTEND_DIR.is_dir():
    app.mount("/", StaticFiles(directory=FRONTEND_DIR, html=True), name="static")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("habit_farm.main:app", host="0.0.0.0", port=3005, log_level="info")
