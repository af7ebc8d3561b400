"""Create a directory user and print a bearer token for it.

Usage:
    uv run python -m scripts.create_user <username> <EM|USER|VENDOR> [full name]
The token lifetime is ACCESS_TOKEN_EXPIRE_MINUTES. All imports use app.*.
"""

import asyncio
import sys

from app.core.config import get_settings
from app.domain.enums import ApprovalRole
from app.infrastructure.persistence.database import _session_factory, dispose_engine
from app.infrastructure.persistence.repositories import UserRepository
from app.infrastructure.security import create_access_token


async def main() -> None:
    """Create user (username must be unique) and print its id and token."""
    if len(sys.argv) < 3:
        print(
            "Usage: uv run python -m scripts.create_user <username> <EM|USER|VENDOR> [full name]",
            file=sys.stderr,
        )
        sys.exit(1)
    username = sys.argv[1]
    try:
        role = ApprovalRole(sys.argv[2].upper())
    except ValueError:
        print(f"Unknown role: {sys.argv[2]}. Allowed: {', '.join(ApprovalRole.values())}", file=sys.stderr)
        sys.exit(1)
    full_name = " ".join(sys.argv[3:]) or None

    get_settings()
    session_factory = _session_factory()
    try:
        async with session_factory() as session:
            async with session.begin():
                user_repo = UserRepository(session)
                if await user_repo.get_by_username(username):
                    print(f"User already exists: {username}", file=sys.stderr)
                    sys.exit(1)
                user = await user_repo.create_user(
                    username=username, role=role.value, full_name=full_name
                )
        token = create_access_token({"sub": user.id, "role": role.value})
        print(f"Created user: {user.id} ({username}, {role.value})")
        print(f"Token: {token}")
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
