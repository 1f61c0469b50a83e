"""
Webhook module - FastAPI route handlers.

Includes:
- interactions.py: Signed slash command interactions
"""

from webhook.interactions import create_interactions_router, respond_to_request

__all__ = ["create_interactions_router", "respond_to_request"]
