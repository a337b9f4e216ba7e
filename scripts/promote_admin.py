#!/usr/bin/env python3
"""
Grant the admin role to an existing user.

Usage:
    python scripts/promote_admin.py someone@example.com
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from src.infrastructure.db.models import UserModel, UserRole
from src.infrastructure.db.session import dispose_engine, get_session_factory


async def promote(email: str) -> bool:
    session_factory = get_session_factory()
    try:
        async with session_factory() as session:
            result = await session.execute(
                select(UserModel).where(UserModel.email == email.lower().strip())
            )
            user = result.scalar_one_or_none()
            if user is None:
                return False
            user.role = UserRole.ADMIN
            await session.commit()
            return True
    finally:
        await dispose_engine()


def main() -> None:
    if len(sys.argv) != 2:
        print("Usage: python scripts/promote_admin.py <email>")
        sys.exit(2)

    email = sys.argv[1]
    if not asyncio.run(promote(email)):
        print(f"❌ No user found with email {email}")
        sys.exit(1)
    print(f"✅ {email} is now an admin")


if __name__ == "__main__":
    main()
