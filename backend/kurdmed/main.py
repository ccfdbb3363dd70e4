from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from kurdmed.api.routes.account_routes import router as account_routes
from kurdmed.api.routes.chat_routes import router as chat_routes
from kurdmed.api.routes.identification_routes import router as identification_routes
from kurdmed.core.config import settings
from kurdmed.core.logging_config import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Kurd Med",
        description=(
            "Medication identification from packaging photos, names and chat.\n\n"
            "⚠️ Informational only; not a substitute for professional medical advice."
        ),
        version="1.0.0",
    )

    # Let the frontend (local dev server) talk to the backend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Session-Id"],
    )

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT"
            }
        }
        for path in openapi_schema["paths"].values():
            for method in path.values():
                method.setdefault("security", []).append({"BearerAuth": []})
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    app.include_router(identification_routes)
    app.include_router(chat_routes)
    app.include_router(account_routes)

    @app.get("/", tags=["health"])
    def health_check() -> dict:
        return {"service": "kurd-med", "status": "ok"}

    return app


app = create_app()
