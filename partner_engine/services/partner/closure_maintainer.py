"""
Referral closure maintenance.

Writes the denormalized ancestor chain when a new user attaches to a
referrer: (referrer, new, 1) plus (ancestor, new, d + 1) for every
ancestor of the referrer at distance d <= 4.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.config.partner_program import (
    DEFAULT_PROGRAM_CONFIG,
    MAX_REFERRAL_DEPTH,
    PartnerProgramConfig,
)
from partner_engine.models.partner_relationship import PartnerRelationship
from partner_engine.repositories.partner_relationship_repository import (
    PartnerRelationshipRepository,
)
from partner_engine.repositories.user_repository import UserRepository
from partner_engine.services.base_service import BaseService, transaction
from partner_engine.utils.exceptions import (
    InvalidReferrer,
    PartnerNotFound,
    ReferralAlreadyAttached,
)
from partner_engine.utils.referral_codes import (
    is_valid_referral_code_format,
    normalize_referral_code,
)


class ClosureMaintainer(BaseService):
    """Maintains the partner relationship closure table."""

    def __init__(
        self,
        session: AsyncSession,
        config: PartnerProgramConfig = DEFAULT_PROGRAM_CONFIG,
    ) -> None:
        """Initialize closure maintainer."""
        super().__init__(session, config)
        self.relationships = PartnerRelationshipRepository(session)
        self.users = UserRepository(session)

    @transaction
    async def attach_referral(
        self, new_user_id: int, referrer_id: int
    ) -> list[PartnerRelationship]:
        """
        Attach a new user under a referrer.

        Called once per user at signup. All rows are inserted in one
        transaction; nothing existing changes.

        Args:
            new_user_id: Newly registered user
            referrer_id: Direct referrer

        Returns:
            Created closure rows, level 1 first

        Raises:
            InvalidReferrer: Referrer missing, self-referral or loop
            PartnerNotFound: New user missing
            ReferralAlreadyAttached: New user already has an upline
        """
        # Self-referral check
        if new_user_id == referrer_id:
            raise InvalidReferrer(referrer_id, "self-referral")

        if await self.users.get_by_id(referrer_id) is None:
            raise InvalidReferrer(referrer_id, "not found")
        if await self.users.get_by_id(new_user_id) is None:
            raise PartnerNotFound(new_user_id)

        if await self.relationships.has_upline(new_user_id):
            raise ReferralAlreadyAttached(new_user_id)

        # Loop check: referrer must not be in the new user's downline
        if await self.relationships.is_ancestor(new_user_id, referrer_id):
            raise InvalidReferrer(referrer_id, "referral loop")

        ancestors = await self.relationships.get_ancestors(referrer_id)

        rows = [{"partner_id": referrer_id, "referral_id": new_user_id, "level": 1}]
        for ancestor in ancestors:
            # Ancestors deeper than 4 hops cannot reach level 5
            if ancestor.level + 1 > MAX_REFERRAL_DEPTH:
                continue
            rows.append(
                {
                    "partner_id": ancestor.partner_id,
                    "referral_id": new_user_id,
                    "level": ancestor.level + 1,
                }
            )

        created = await self.relationships.bulk_create(rows)

        self.logger.info(
            "Partner relationship chain created",
            extra={
                "new_user_id": new_user_id,
                "referrer_id": referrer_id,
                "levels_created": len(created),
            },
        )
        return created

    async def attach_by_referral_code(self, new_user_id: int, code: str) -> bool:
        """
        Attach a new user by the referral code used at signup.

        Unknown or malformed codes are ignored so that signup never fails
        on a bad link.

        Args:
            new_user_id: Newly registered user
            code: Referral code as entered

        Returns:
            True if attached, False if the code was ignored

        Raises:
            InvalidReferrer: Self-referral or loop
            ReferralAlreadyAttached: New user already has an upline
        """
        normalized = normalize_referral_code(code or "")
        if not is_valid_referral_code_format(normalized):
            self.logger.info(
                "Ignoring malformed referral code",
                extra={"new_user_id": new_user_id, "code": code},
            )
            return False

        referrer = await self.users.get_by_referral_code(normalized)
        if referrer is None:
            self.logger.info(
                "Ignoring unknown referral code",
                extra={"new_user_id": new_user_id, "code": normalized},
            )
            return False

        await self.attach_referral(new_user_id, referrer.id)
        return True
