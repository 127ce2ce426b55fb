from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from upload_api.config import get_cors_allowed_origins, get_log_level
from upload_api.errors import register_error_handlers
from upload_api.logging_config import configure_logging
from upload_api.routers import uploads_router


def create_app() -> FastAPI:
    configure_logging(get_log_level())

    app = FastAPI(
        title="Direct Upload API",
        description="Presigned URLs for direct browser uploads to object storage",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(uploads_router)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "direct-upload-api"}

    return app


app = create_app()
