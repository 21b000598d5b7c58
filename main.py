from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from core.config import get_settings, setup_logging
from core.lifespan import lifespan
from routes.media_api import router as media_router
from routes.sync_api import router as sync_router
from routes.webhooks_api import router as webhooks_router

setup_logging()
settings = get_settings()

app = FastAPI(title="wtw", lifespan=lifespan)
app.include_router(sync_router)
app.include_router(media_router)
app.include_router(webhooks_router)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.error("URL: {} 请求失败： {}", request.url, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body"}
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower(), reload=False)
