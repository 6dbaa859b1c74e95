"""
CuraLink API - FastAPI backend for the patient and researcher web client
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from dotenv import find_dotenv, load_dotenv

# Load local .env before the route modules build their services from the environment.
load_dotenv(find_dotenv(usecwd=True), override=False)

from .errors import register_exception_handlers  # noqa: E402
from .routes import (  # noqa: E402
    assistant,
    auth,
    chat,
    connections,
    external_data,
    favorites,
    notifications,
)
from curalink.utils.logging_config import LogFiles, Logger, clear_trace_id, set_trace_id  # noqa: E402

app = FastAPI(
    title="CuraLink API",
    description="API for researcher connections, chat, favorites and medical data search",
    version="0.1.0",
)

# CORS for the web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def _trace_requests(request: Request, call_next):
    trace_id = set_trace_id(request.headers.get("X-Trace-Id"))
    try:
        response = await call_next(request)
        Logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}", file=LogFiles.API
        )
        response.headers["X-Trace-Id"] = trace_id
        return response
    finally:
        clear_trace_id()


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": "0.1.0"}


# Include routers
app.include_router(auth.router, prefix="/api", tags=["Auth"])
app.include_router(connections.router, prefix="/api", tags=["Connections"])
app.include_router(chat.router, prefix="/api", tags=["Chat"])
app.include_router(favorites.router, prefix="/api", tags=["Favorites"])
app.include_router(notifications.router, prefix="/api", tags=["Notifications"])
app.include_router(external_data.router, prefix="/api", tags=["External Data"])
app.include_router(assistant.router, prefix="/api", tags=["Assistant"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
