from .routes import get_catalog, router

__all__ = ["get_catalog", "router"]
