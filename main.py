"""
FastAPI Application Entry Point

Integrates:
  - Slash command interactions webhook
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from config import Config
from slash.client import SlashClient

# Setup logging
logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def ping(arguments: dict, interaction) -> bool:
    """/ping - liveness check from inside Discord."""
    interaction.respond({"content": "pong"})
    return True


def create_client() -> SlashClient:
    """
    Build the client from Config and register the bundled commands.

    Raises:
        RuntimeError: DISCORD_PUBLIC_KEY is not configured
    """
    if not Config.validate():
        raise RuntimeError("DISCORD_PUBLIC_KEY must be set to serve interactions")

    client = SlashClient(
        public_key=Config.DISCORD_PUBLIC_KEY,
        uri=Config.SLASH_URI,
        logger=logging.getLogger("slash"),
        interactions_path=Config.INTERACTIONS_PATH,
        response_timeout=Config.INTERACTION_RESPONSE_TIMEOUT,
    )
    client.register_command("ping", ping)
    return client


client = create_client()

app = client.create_app(
    title="Slash Interactions API",
    description="Webhook endpoint for Discord slash command interactions",
    version="1.0.0",
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


# Health check endpoints
@app.get("/health/live")
async def health_live():
    """Live health check (Kubernetes liveness probe)."""
    return {"status": "alive"}


@app.get("/health/ready")
async def health_ready():
    """Readiness: command tree frozen."""
    if not client.registry.frozen:
        return {"status": "not_ready", "reason": "commands not frozen"}
    return {"status": "ready", "commands": len(client.registry)}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Slash Interactions API",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "interactions": f"POST {client.interactions_path}",
            "health_live": "GET /health/live",
            "health_ready": "GET /health/ready",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=client.host, port=client.port)
