"""
Password hashing with bcrypt.

bcrypt is deliberately slow, so both helpers run in the thread pool and
never stall the event loop.
"""

import bcrypt
from starlette.concurrency import run_in_threadpool


def _hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def _verify(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed_password.encode())
    except ValueError:
        # Malformed hash in the database
        return False


# Checked for unknown usernames: every failed login costs one bcrypt round.
DUMMY_HASH = _hash("not-a-real-password")


async def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return await run_in_threadpool(_hash, password)


async def verify_password(password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return await run_in_threadpool(_verify, password, hashed_password)
