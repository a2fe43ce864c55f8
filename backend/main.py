import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.encoders import jsonable_encoder
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from config import CORS_ORIGINS, LOG_LEVEL, UPLOAD_DIR, validate_config
from database import engine
from routers.auth import limiter, router as auth_router
from routers.chat import router as chat_router
from routers.communities import router as communities_router
from routers.images import router as images_router
from routers.plants import router as plants_router
from routers.posts import router as posts_router
from routers.users import router as users_router
from services.exceptions import MissingParametersError, ServiceError, TokenError


logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    validate_config()
    logger.info("Seedy API starting")
    yield
    engine.dispose()


app = FastAPI(title="Seedy API", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=CORS_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TokenError)
async def token_error_handler(request: Request, exc: TokenError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """400 naming the fields when all that is wrong is missing fields, 422 otherwise."""
    errors = exc.errors()
    if errors and all(error["type"] == "missing" for error in errors):
        fields = [str(error["loc"][-1]) for error in errors]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": MissingParametersError(*fields).message},
        )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(errors)},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(communities_router)
app.include_router(posts_router)
app.include_router(plants_router)
app.include_router(images_router)
app.include_router(chat_router)

app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
