from server_monitor.api.routes import get_repository, router

__all__ = ["get_repository", "router"]
