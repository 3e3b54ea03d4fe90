"""
Loyalty Service - Point balances, tiers and the transaction ledger
"""
from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from teashop.core.exceptions import (
    InsufficientPoints,
    PersistenceError,
    RewardNotFound,
    RewardUnavailable,
    TeashopError,
    UserNotFound,
)
from teashop.models import User, LoyaltyTransaction, LoyaltyTier, LoyaltyTransactionType, Reward

logger = logging.getLogger(__name__)

SILVER_THRESHOLD = 500
GOLD_THRESHOLD = 1000


def calculate_loyalty_tier(points: int) -> LoyaltyTier:
    """Tier for a point balance; recomputed on every balance change"""
    if points >= GOLD_THRESHOLD:
        return LoyaltyTier.GOLD
    if points >= SILVER_THRESHOLD:
        return LoyaltyTier.SILVER
    return LoyaltyTier.BRONZE


class LoyaltyService:
    """Loyalty ledger business logic

    Ledger writes only flush; the caller commits so that balance, tier and
    ledger row land in the same transaction as whatever triggered them.
    Reward redemption is a standalone operation and commits itself.
    """

    @staticmethod
    def apply(
        db: Session,
        user: User,
        points: int,
        tx_type: LoyaltyTransactionType,
        description: str,
        order_id: Optional[UUID] = None,
    ) -> LoyaltyTransaction:
        """Apply a signed point delta to a user and append the ledger row"""
        new_balance = (user.loyalty_points or 0) + points
        if new_balance < 0:
            raise InsufficientPoints(
                f"Je hebt niet genoeg punten. Je hebt {user.loyalty_points} punten, "
                f"maar er zijn {-points} nodig."
            )

        old_tier = user.loyalty_tier
        user.loyalty_points = new_balance
        user.loyalty_tier = calculate_loyalty_tier(new_balance)

        tx = LoyaltyTransaction(
            user_id=user.id,
            order_id=order_id,
            points=points,
            type=tx_type,
            description=description,
        )
        db.add(tx)
        db.flush()

        logger.info(f"Loyalty {tx_type.value} {points:+d} for user {user.id} -> {new_balance} ({user.loyalty_tier.value})")
        if old_tier != user.loyalty_tier:
            logger.info(f"User {user.id} tier changed {old_tier} -> {user.loyalty_tier.value}")
        return tx

    @staticmethod
    def earn(db: Session, user: User, points: int, description: str, order_id: Optional[UUID] = None) -> LoyaltyTransaction:
        return LoyaltyService.apply(db, user, abs(points), LoyaltyTransactionType.EARN, description, order_id)

    @staticmethod
    def redeem(db: Session, user: User, points: int, description: str, order_id: Optional[UUID] = None) -> LoyaltyTransaction:
        return LoyaltyService.apply(db, user, -abs(points), LoyaltyTransactionType.REDEEM, description, order_id)

    @staticmethod
    def restore(db: Session, user: User, points: int, description: str, order_id: Optional[UUID] = None) -> LoyaltyTransaction:
        """Give back points taken by a cancelled order"""
        return LoyaltyService.apply(db, user, abs(points), LoyaltyTransactionType.ADJUSTMENT, description, order_id)

    @staticmethod
    def get_user_for_update(db: Session, user_id: UUID) -> Optional[User]:
        """Load a user row locked for the current transaction (no-op lock on SQLite)"""
        return db.query(User).filter(User.id == user_id).with_for_update().first()

    @staticmethod
    def get_history(
        db: Session,
        user_id: UUID,
        tx_type: Optional[LoyaltyTransactionType] = None,
        limit: int = 20,
    ) -> List[LoyaltyTransaction]:
        """Latest ledger rows for a user"""
        query = db.query(LoyaltyTransaction).filter(LoyaltyTransaction.user_id == user_id)
        if tx_type:
            query = query.filter(LoyaltyTransaction.type == tx_type)

        return query.order_by(LoyaltyTransaction.created_at.desc()).limit(limit).all()

    @staticmethod
    def ledger_balance(db: Session, user_id: UUID) -> int:
        """Sum of all ledger rows; should equal User.loyalty_points"""
        total = db.query(func.coalesce(func.sum(LoyaltyTransaction.points), 0)).filter(
            LoyaltyTransaction.user_id == user_id
        ).scalar()
        return int(total or 0)

    # ===================== REWARDS =====================

    @staticmethod
    def get_rewards(db: Session) -> List[Reward]:
        """Rewards on offer, cheapest first"""
        return db.query(Reward).filter(Reward.is_available == True).order_by(Reward.points_cost.asc()).all()

    @staticmethod
    def redeem_reward(db: Session, user_id: UUID, reward_id: UUID) -> Tuple[User, Reward, LoyaltyTransaction]:
        """Trade points for a catalogue reward"""
        try:
            reward = db.query(Reward).filter(Reward.id == reward_id).first()
            if not reward:
                raise RewardNotFound()
            if not reward.is_available:
                raise RewardUnavailable()

            user = LoyaltyService.get_user_for_update(db, user_id)
            if not user:
                raise UserNotFound("Gebruiker niet gevonden")

            if user.loyalty_points < reward.points_cost:
                raise InsufficientPoints(
                    f"Je hebt niet genoeg punten. Je hebt {user.loyalty_points} punten, "
                    f"maar deze beloning kost {reward.points_cost} punten."
                )

            tx = LoyaltyService.redeem(db, user, reward.points_cost, f"Ingewisseld: {reward.name}")
            db.commit()
        except TeashopError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to redeem reward {reward_id} for user {user_id}: {e}")
            raise PersistenceError(f"Could not redeem reward: {e}") from e

        db.refresh(user)
        logger.info(f"User {user.id} redeemed {reward.slug} for {reward.points_cost} points")
        return user, reward, tx
