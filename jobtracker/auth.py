"""
Identity gate: resolves the caller's owner identity from a bearer token.
"""

import secrets
from typing import Callable, Optional

from flask import jsonify
from flask_login import LoginManager, UserMixin, current_user
from sqlalchemy.exc import SQLAlchemyError

from .database import ApiToken, get_session
from .errors import AuthorizationError, StorageError
from .logger import get_logger

login_manager = LoginManager()


class CurrentUser(UserMixin):
    def __init__(self, owner_id: str):
        self.id = owner_id


def token_from_header(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_token(token: str, session_factory: Callable = get_session) -> Optional[str]:
    """Return the owner identity a token was issued to, or None."""
    try:
        with session_factory() as session:
            row = session.query(ApiToken).filter(ApiToken.token == token).first()
            return row.owner_id if row else None
    except SQLAlchemyError as e:
        get_logger().error("Token lookup failed", error=str(e))
        return None


def issue_token(owner_id: str, session_factory: Callable = get_session) -> str:
    """
    Create and store a new bearer token for owner_id.

    Raises:
        StorageError: if the token could not be saved
    """
    if not owner_id:
        raise ValueError("owner_id is required")
    token = secrets.token_hex(32)
    try:
        with session_factory() as session:
            session.add(ApiToken(token=token, owner_id=owner_id))
            session.commit()
    except SQLAlchemyError as e:
        get_logger().error("Token issue failed", owner_id=owner_id, error=str(e))
        raise StorageError("Could not issue token") from e
    get_logger().info("Issued API token", owner_id=owner_id)
    return token


@login_manager.request_loader
def load_user_from_request(request):
    token = token_from_header(request.headers.get("Authorization"))
    if token is None:
        return None
    owner_id = resolve_token(token)
    return CurrentUser(owner_id) if owner_id else None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "Unauthorized"}), 401


def current_owner_id() -> str:
    """
    Owner identity of the current request.

    Raises:
        AuthorizationError: if the request is not authenticated
    """
    if not current_user or not current_user.is_authenticated:
        raise AuthorizationError("Authentication required")
    return current_user.id
