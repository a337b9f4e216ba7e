#!/usr/bin/env python3
"""
Recompute every stored trust score from current credential state.

Run after a formula change or to repair drift:
    python scripts/recalculate_trust_scores.py [--batch-size 200]
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.logging import setup_logging
from src.domain.services.trust_score import TrustScoreService
from src.infrastructure.db.session import dispose_engine, get_session_factory


async def recalculate(batch_size: int) -> int:
    session_factory = get_session_factory()
    try:
        async with session_factory() as session:
            return await TrustScoreService(session).recalculate_all(batch_size=batch_size)
    finally:
        await dispose_engine()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--batch-size", type=int, default=200)
    args = parser.parse_args()

    setup_logging()
    changed = asyncio.run(recalculate(args.batch_size))
    print(f"✅ Recalculated trust scores ({changed} changed)")


if __name__ == "__main__":
    main()
