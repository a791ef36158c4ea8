# src/pm_admin/application/service.py
"""Admin application service."""
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.domain.invariants import count_markets, verify_pool_invariants


class AdminService:
    async def verify_all_invariants(self, db: AsyncSession) -> dict[str, Any]:
        """Run pool (INV-1/2) and lifecycle (INV-3) checks across every market."""
        violations = await verify_pool_invariants(db)
        return {
            "ok": len(violations) == 0,
            "markets_checked": await count_markets(db),
            "violations": violations,
        }
