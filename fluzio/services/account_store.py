"""
Account persistence.

load / save / atomic_increment / add_xp over the accounts table. save is a
conditional write: Account.version is the mapper's version_id_col, so an
UPDATE against a row that changed since it was loaded matches zero rows and
surfaces here as ConflictError.
"""
import logging
from typing import Callable, List, Optional

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..models import Account, AccountRole
from ..rules.business_levels import MAX_SUB_LEVEL, SUB_LEVEL_THRESHOLDS
from ..utils.exceptions import (
    AccountNotFoundError,
    ConflictError,
    DataAccessError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Counters that may be changed with atomic_increment. xp is absent: it only
# moves together with sub_level, through add_xp.
INCREMENTABLE_FIELDS = frozenset({
    'growth_credits',
    'lifetime_points',
    'missions_completed',
    'rewards_redeemed',
    'missions_created_this_month',
    'meetups_hosted_this_month',
    'meetups_joined_this_month',
    'boosts_used_this_month',
})


def sub_level_expression(xp):
    """SQL rendition of level_progression.sub_level_from_xp for an xp expression."""
    whens = [
        (xp >= SUB_LEVEL_THRESHOLDS[index], index + 1)
        for index in range(MAX_SUB_LEVEL - 1, 0, -1)
    ]
    return sa.case(*whens, else_=1)


class AccountStore:
    """SQLAlchemy-backed account store."""

    def load(self, account_id: str) -> Account:
        """
        Load an account with fresh column values.

        Raises:
            AccountNotFoundError: no account with this id
            DataAccessError: the database could not be read
        """
        try:
            account = db.session.get(Account, account_id, populate_existing=True)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error('Failed to load account %s: %s', account_id, e)
            raise DataAccessError(f'Could not load account {account_id}', e) from e

        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def save(self, account: Account, *related) -> Account:
        """
        Commit the account (and any related rows, such as audit entries).

        Raises:
            ConflictError: the row was modified after it was loaded
            DataAccessError: the database could not be written
        """
        account_id = account.id
        try:
            db.session.add(account)
            for obj in related:
                db.session.add(obj)
            db.session.commit()
        except StaleDataError as e:
            db.session.rollback()
            logger.warning('Stale write rejected for account %s', account_id)
            raise ConflictError('Account', account_id) from e
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error('Failed to save account %s: %s', account_id, e)
            raise DataAccessError(f'Could not save account {account_id}', e) from e
        return account

    def atomic_increment(self, account_id: str, field: str, delta: int) -> int:
        """
        Add delta to a counter with a single UPDATE and return the new value.

        The increment also bumps the row version, so a transition loaded
        before it cannot overwrite the new value.
        """
        if field not in INCREMENTABLE_FIELDS:
            raise ValidationError(f'{field} cannot be incremented', field='field')

        column = getattr(Account, field)
        stmt = (
            sa.update(Account)
            .where(Account.id == account_id)
            .values({column: column + delta, Account.version: Account.version + 1})
            .execution_options(synchronize_session=False)
        )
        try:
            result = db.session.execute(stmt)
            if result.rowcount == 0:
                db.session.rollback()
                raise AccountNotFoundError(account_id)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error('Failed to increment %s for account %s: %s', field, account_id, e)
            raise DataAccessError(f'Could not update account {account_id}', e) from e

        return getattr(self.load(account_id), field)

    def add_xp(self, account_id: str, delta: int,
               audit: Optional[Callable[[Account], object]] = None) -> Account:
        """
        Add delta XP in one UPDATE that also recomputes sub_level and
        withdraws a pending upgrade request once sub_level drops below 9.

        xp and sub_level are never committed apart. audit, if given, builds
        a row from the updated account that is committed with the UPDATE.

        Raises:
            AccountNotFoundError: no account with this id
            DataAccessError: the database could not be written
        """
        new_xp = Account.xp + delta
        below_top = new_xp < SUB_LEVEL_THRESHOLDS[MAX_SUB_LEVEL - 1]
        stmt = (
            sa.update(Account)
            .where(Account.id == account_id)
            .values({
                Account.xp: new_xp,
                Account.sub_level: sub_level_expression(new_xp),
                Account.upgrade_requested: sa.case((below_top, sa.false()), else_=Account.upgrade_requested),
                Account.upgrade_requested_at: sa.case((below_top, sa.null()), else_=Account.upgrade_requested_at),
                Account.version: Account.version + 1,
            })
            .execution_options(synchronize_session=False)
        )
        try:
            result = db.session.execute(stmt)
            if result.rowcount == 0:
                db.session.rollback()
                raise AccountNotFoundError(account_id)
            account = db.session.get(Account, account_id, populate_existing=True)
            if audit is not None:
                db.session.add(audit(account))
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error('Failed to add XP for account %s: %s', account_id, e)
            raise DataAccessError(f'Could not update account {account_id}', e) from e
        return account

    def pending_upgrade_requests(self) -> List[Account]:
        """Business accounts waiting for an admin decision, oldest first."""
        try:
            return (
                Account.query
                .filter(
                    Account.role == AccountRole.BUSINESS.value,
                    Account.upgrade_requested.is_(True),
                )
                .order_by(Account.upgrade_requested_at.asc())
                .all()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            raise DataAccessError('Could not list pending upgrade requests', e) from e
