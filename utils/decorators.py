from __future__ import annotations

import logging
from functools import wraps

from flask import g, request

from services.container import current_services
from services.errors import ExpiredTokenError, ForbiddenError, InvalidTokenError, UnauthenticatedError

logger = logging.getLogger(__name__)


def bearer_token() -> str | None:
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def jwt_required():
    """
    Guard a view with a bearer access token.

    401 when no token is presented, 403 when it does not verify (expired and
    invalid look the same to the client). On success g.identity holds the
    AccessIdentity decoded from the token.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if token is None:
                raise UnauthenticatedError()
            try:
                identity = current_services().tokens.verify_access_token(token)
            except ExpiredTokenError:
                logger.debug("Rejected expired access token on %s", request.path)
                raise ForbiddenError()
            except InvalidTokenError as exc:
                logger.debug("Rejected access token on %s: %s", request.path, exc.message)
                raise ForbiddenError()

            g.identity = identity
            return fn(*args, **kwargs)

        return wrapper

    return decorator
