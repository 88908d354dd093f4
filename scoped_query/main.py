import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from scoped_query.core.config import settings
from scoped_query.core.http_hardening import install_http_hardening
from scoped_query.api.router import router as api_router
from scoped_query.resources.registry import load_resources

logging.getLogger("scoped_query").setLevel(settings.LOG_LEVEL.upper())

# Bindings are checked on import; a broken one fails startup.
load_resources()

app = FastAPI(title=settings.APP_NAME, version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
install_http_hardening(app)

app.include_router(api_router, prefix="/api")

@app.get("/", include_in_schema=False)
def landing():
    return JSONResponse({"service": settings.APP_NAME, "status": "ok"})

@app.get("/health")
def health():
    return {"status": "ok"}
