"""Utility for resolving the user an import acts on behalf of."""

import os
from typing import Optional

from fincontrol.domain.errors import ValidationError

USER_ENV_VAR = "FINCONTROL_USER_ID"


def resolve_current_user(user: Optional[str | int] = None) -> int:
    """Resolve the acting user ID.

    Args:
        user: Explicit user ID (int or string representation of int). If
            None, the FINCONTROL_USER_ID environment variable is used.

    Returns:
        User ID

    Raises:
        ValidationError: If no user is configured or the value is not a
            positive integer
    """
    if user is None:
        user = os.environ.get(USER_ENV_VAR)

    if user is None or (isinstance(user, str) and not user.strip()):
        raise ValidationError(
            f"No current user configured. Pass --user or set {USER_ENV_VAR}."
        )

    try:
        user_id = int(user)
    except (ValueError, TypeError):
        raise ValidationError(f"User ID '{user}' is not a number")

    if user_id <= 0:
        raise ValidationError(f"User ID {user_id} must be positive")
    return user_id
