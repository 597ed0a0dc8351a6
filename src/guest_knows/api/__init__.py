"""HTTP API for guest_knows."""

from guest_knows.api.app import create_app

__all__ = ["create_app"]
