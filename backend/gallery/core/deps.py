# Shared dependencies (admin gate)
# Static shared-secret check: one token, no sessions or scopes.
import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request

from gallery.core.context import GalleryContext, get_context
from gallery.core.errors import AuthDenied

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "  # case-sensitive, single space


@dataclass(frozen=True)
class AdminPrincipal:
    name: str = "admin"


def extract_token(header: Optional[str]) -> str:
    if header is None:
        return ""
    if header.startswith(BEARER_PREFIX):
        header = header[len(BEARER_PREFIX):]
    return header.strip()


def check_admin_token(header: Optional[str], secret: str) -> bool:
    expected = (secret or "").strip()
    given = extract_token(header)
    if not expected or not given:
        return False
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def require_admin(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    ctx: GalleryContext = Depends(get_context),
) -> AdminPrincipal:
    if not check_admin_token(authorization, ctx.settings.ADMIN_TOKEN):
        logger.info(f"admin denied: {request.method} {request.url.path}")
        raise AuthDenied()
    principal = AdminPrincipal()
    request.state.admin = principal
    return principal
