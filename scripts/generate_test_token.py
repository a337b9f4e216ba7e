#!/usr/bin/env python3
"""Generate test JWT tokens for API testing."""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api.deps import issue_smoke_token
from src.core.auth import Role

user_id = sys.argv[1] if len(sys.argv) > 1 else "user-test"

# Generate admin token
admin_token = issue_smoke_token("admin-test", role=Role.ADMIN, email="admin@example.com")
print(f"Admin Token:\n{admin_token}\n")

# Generate user token for the given credential owner
user_token = issue_smoke_token(user_id, role=Role.USER)
print(f"User Token ({user_id}):\n{user_token}")
