"""
Basic auth gate for the API documentation (/docs, /redoc, /openapi.json)
"""
import base64
import binascii
import secrets

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from app.config import settings

DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")


def _unauthorized() -> PlainTextResponse:
    return PlainTextResponse(
        "Authentication required",
        status_code=401,
        headers={"WWW-Authenticate": 'Basic realm="Authentication required"'},
    )


class DocsAuthMiddleware(BaseHTTPMiddleware):
    """Общий логин/пароль (DOCS_USERNAME / DOCS_PASSWORD) для документации"""

    def __init__(self, app, username: str = None, password: str = None):
        super().__init__(app)
        self.username = username if username is not None else settings.DOCS_USERNAME
        self.password = password if password is not None else settings.DOCS_PASSWORD

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(DOCS_PATHS):
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        if not auth_header.startswith("Basic "):
            return _unauthorized()

        try:
            credentials = base64.b64decode(auth_header[len("Basic "):]).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return _unauthorized()
        username, _, password = credentials.partition(":")

        valid_user = secrets.compare_digest(username.encode(), self.username.encode())
        valid_password = secrets.compare_digest(password.encode(), self.password.encode())
        if not (valid_user and valid_password):
            return _unauthorized()
        return await call_next(request)
