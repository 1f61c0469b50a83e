"""
Slash Client

Serves slash command interactions over HTTP. Can run its own uvicorn
server or be used as a request handler inside another ASGI app.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional, Union

from fastapi import FastAPI, Request, Response
from nacl.signing import VerifyKey

from webhook.interactions import (
    DEFAULT_RESPONSE_TIMEOUT,
    create_interactions_router,
    respond_to_request,
)

from .dispatcher import InteractionDispatcher
from .registry import CommandCallback, CommandNode, CommandPath, CommandRegistry

DEFAULT_URI = "0.0.0.0:80"


def parse_uri(uri: str) -> tuple[str, int]:
    """
    Split "host:port" into its parts.

    Raises:
        ValueError: Missing or non-numeric port
    """
    host, sep, port = uri.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid uri {uri!r}, expected host:port")
    return host or "0.0.0.0", int(port)


class SlashClient:
    """
    Slash command webhook server.

    Usage:
        client = SlashClient(public_key="...")
        client.register_command("hello", hello)
        client.register_command(["config", "get"], config_get)
        client.run()
    """

    def __init__(
        self,
        public_key: Union[str, bytes, VerifyKey],
        uri: str = DEFAULT_URI,
        logger: Optional[logging.Logger] = None,
        interactions_path: str = "/interactions",
        response_timeout: Optional[float] = DEFAULT_RESPONSE_TIMEOUT,
    ):
        self.host, self.port = parse_uri(uri)
        self.logger = logger or logging.getLogger(__name__)
        self.interactions_path = interactions_path
        self.response_timeout = response_timeout

        self.registry = CommandRegistry()
        self.dispatcher = InteractionDispatcher(self.registry, public_key)
        self._app: Optional[FastAPI] = None

    def register_command(
        self,
        name: CommandPath,
        callback: Optional[CommandCallback] = None,
    ) -> CommandNode:
        """
        Register a command with the client.

        Args:
            name: "name" or ["name", "sub", ...]
            callback: callback(arguments, interaction); truthy return = handled

        Raises:
            RegistrationConflict: Command already registered
            RegistryFrozenError: Client is already serving
        """
        node = self.registry.register(name, callback)
        self.logger.info(f"Registered command {name!r}")
        return node

    async def handle_request(self, request: Request) -> Response:
        """Handle a request received by another FastAPI/Starlette app."""
        return await respond_to_request(self.dispatcher, request, self.response_timeout)

    @property
    def app(self) -> FastAPI:
        """FastAPI app serving the interactions endpoint (built once)."""
        if self._app is None:
            self._app = self.create_app()
        return self._app

    def create_app(self, **fastapi_kwargs) -> FastAPI:
        @asynccontextmanager
        async def lifespan(app: FastAPI):
            self.registry.freeze()
            self.logger.info(
                f"Serving {len(self.registry)} command(s) on "
                f"{self.host}:{self.port}{self.interactions_path}"
            )
            yield
            self.logger.info("Slash client shutting down...")

        fastapi_kwargs.setdefault("title", "Slash Interactions")
        app = FastAPI(lifespan=lifespan, **fastapi_kwargs)
        app.include_router(
            create_interactions_router(
                self.dispatcher,
                path=self.interactions_path,
                response_timeout=self.response_timeout,
            )
        )
        return app

    def run(self, **uvicorn_kwargs) -> None:
        """Freeze the command tree and serve until interrupted."""
        import uvicorn

        self.registry.freeze()
        uvicorn.run(self.app, host=self.host, port=self.port, **uvicorn_kwargs)
