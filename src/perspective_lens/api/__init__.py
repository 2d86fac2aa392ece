from perspective_lens.api.app import CORS_ALLOW_HEADERS, create_app

__all__ = ["CORS_ALLOW_HEADERS", "create_app"]
