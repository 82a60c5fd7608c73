#!/usr/bin/env python3
"""Generate a bearer token for calling the API from curl or scripts."""

import sys
from datetime import timedelta

from dotenv import load_dotenv

from backend.src.services.auth import AuthError, AuthService
from backend.src.services.config import get_config


def generate_token(user_id="local-dev", days=None):
    """Sign a JWT for ``user_id`` with the configured secret."""
    load_dotenv()
    auth_service = AuthService(config=get_config())
    expires_in = timedelta(days=days) if days else None

    try:
        token, expires_at = auth_service.issue_token_response(user_id, expires_in=expires_in)
    except AuthError as e:
        print(f"Error generating token: {e.message}")
        print("Make sure JWT_SECRET_KEY is set in your environment or .env")
        return None

    print(f"Generated token for user '{user_id}' (expires {expires_at.isoformat()}):")
    print(f"Authorization: Bearer {token}")
    return token


if __name__ == "__main__":
    user_id = sys.argv[1] if len(sys.argv) > 1 else "local-dev"
    days = int(sys.argv[2]) if len(sys.argv) > 2 else None
    sys.exit(0 if generate_token(user_id, days) else 1)
