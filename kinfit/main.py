from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse

from .settings import get_settings
from .db import init_db
from .logger import setup_logger
from .services.volume import router as volume_router
from .services.workouts import router as workouts_router

app = FastAPI(title="Kinfit API")

app.include_router(volume_router, prefix="/api")
app.include_router(workouts_router, prefix="/api")


@app.exception_handler(HTTPException)
async def http_error(request: Request, exc: HTTPException):
    # All API errors use {"error": message}
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.on_event("startup")
async def on_startup() -> None:
    settings = get_settings()
    setup_logger(level=settings.log_level, log_file=settings.log_file)
    await init_db()
