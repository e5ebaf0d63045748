"""
DeepUno Server - FastAPI HTTP layer
"""

from deepuno.server.app import app, create_app

__all__ = ["app", "create_app"]
