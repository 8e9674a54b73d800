from .api_client import APIClient, BearerTokenAuth, get_client

__all__ = ["APIClient", "BearerTokenAuth", "get_client"]
