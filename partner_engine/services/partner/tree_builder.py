"""
Referral tree builder.

Builds a depth-capped view of a partner's downline. Every step queries
level 1 rows relative to the current nodes, walking breadth-first one
depth at a time.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.config.partner_program import (
    DEFAULT_PROGRAM_CONFIG,
    MAX_REFERRAL_DEPTH,
    PartnerProgramConfig,
)
from partner_engine.repositories.partner_relationship_repository import (
    PartnerRelationshipRepository,
)
from partner_engine.repositories.user_repository import UserRepository
from partner_engine.services.base_service import BaseService
from partner_engine.services.partner.volume_aggregator import (
    SqlTransactionVolumeAggregator,
    TransactionVolumeAggregator,
)
from partner_engine.utils.exceptions import PartnerNotFound


@dataclass
class ReferralNode:
    """One referral in the tree."""

    user_id: int
    name: str
    email: str
    joined_at: datetime
    depth: int
    total_spent: Decimal
    children: list["ReferralNode"] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        """Referral has completed spend."""
        return self.total_spent > 0


@dataclass
class ReferralTree:
    """Downline of a partner."""

    root_user_id: int
    max_depth: int
    direct_count: int
    total_team_size: int
    referrals: list[ReferralNode] = field(default_factory=list)


def clamp_depth(max_depth: int) -> int:
    """Clamp requested depth to 1..5."""
    return max(1, min(MAX_REFERRAL_DEPTH, int(max_depth)))


class ReferralTreeBuilder(BaseService):
    """Builds referral trees from the closure table."""

    def __init__(
        self,
        session: AsyncSession,
        config: PartnerProgramConfig = DEFAULT_PROGRAM_CONFIG,
        aggregator: TransactionVolumeAggregator | None = None,
    ) -> None:
        """Initialize referral tree builder."""
        super().__init__(session, config)
        self.relationships = PartnerRelationshipRepository(session)
        self.users = UserRepository(session)
        self.aggregator = aggregator or SqlTransactionVolumeAggregator(session)

    async def build_tree(self, root_user_id: int, max_depth: int = 1) -> ReferralTree:
        """
        Build the referral tree of a partner.

        Args:
            root_user_id: Partner user ID
            max_depth: Requested depth, clamped to 1..5

        Returns:
            ReferralTree

        Raises:
            PartnerNotFound: If the root user does not exist
        """
        if await self.users.get_by_id(root_user_id) is None:
            raise PartnerNotFound(root_user_id)

        depth_limit = clamp_depth(max_depth)
        tree = ReferralTree(
            root_user_id=root_user_id,
            max_depth=depth_limit,
            direct_count=0,
            total_team_size=await self.relationships.count_team(root_user_id),
        )

        children_of: dict[int, list[ReferralNode]] = {root_user_id: tree.referrals}
        visited = {root_user_id}
        frontier = [root_user_id]

        for depth in range(1, depth_limit + 1):
            rows = await self.relationships.get_direct_referrals_of(frontier)
            rows = [row for row in rows if row.referral_id not in visited]
            if not rows:
                break

            spent = await self.aggregator.sum_completed_by_user(
                [row.referral_id for row in rows]
            )

            frontier = []
            for row in rows:
                if row.referral_id in visited:
                    continue
                visited.add(row.referral_id)
                name = " ".join(
                    part for part in (row.first_name, row.last_name) if part
                )
                node = ReferralNode(
                    user_id=row.referral_id,
                    name=name or row.email,
                    email=row.email,
                    joined_at=row.joined_at,
                    depth=depth,
                    total_spent=spent.get(row.referral_id, Decimal("0")),
                )
                children_of[row.partner_id].append(node)
                children_of[node.user_id] = node.children
                frontier.append(node.user_id)

        tree.direct_count = len(tree.referrals)

        self.logger.debug(
            "Referral tree built",
            extra={
                "root_user_id": root_user_id,
                "max_depth": depth_limit,
                "direct_count": tree.direct_count,
                "total_team_size": tree.total_team_size,
            },
        )
        return tree
