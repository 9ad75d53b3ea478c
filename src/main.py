import uvicorn
from fastapi import FastAPI

from core.config import settings
from core.interceptor import create_interceptor
from core.lifespan import lifespan
from core.middleware import ErrorInterceptorMiddleware
from utility.logger import setup_logger

setup_logger(settings.LOG_LEVEL)

interceptor = create_interceptor(settings)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="요청 파이프라인 에러 인터셉터: 예외/경고를 HTTP 응답으로 변환",
    lifespan=lifespan,
)

app.state.interceptor = interceptor
app.add_middleware(ErrorInterceptorMiddleware, interceptor=interceptor)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "interceptor_started": interceptor.started,
        "error_status_code": interceptor.status_code,
        "renderer": settings.ERROR_RENDERER,
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        access_log=False,
    )
