"""
Tests for LevelService and AccountStore.

Tests cover:
- Atomic XP grants and sub-level recomputation
- Promotion workflow persistence and audit rows
- Optimistic-concurrency conflicts and re-evaluation
- Storage failures surfacing as DataAccessError
- Level changes refused for non-business accounts
"""
import pytest
import sqlalchemy as sa
from sqlalchemy.exc import OperationalError
from datetime import datetime
from unittest.mock import patch

from fluzio.extensions import db
from fluzio.models import Account, LevelChangeLog
from fluzio.rules.level_progression import UpgradeFailure, sub_level_from_xp
from fluzio.services.account_store import AccountStore
from fluzio.services.level_service import LevelService
from fluzio.utils.exceptions import (
    AccountNotFoundError,
    ConflictError,
    DataAccessError,
    ValidationError,
)


def _bump_version(account_id, **values):
    """Write to the row behind the session's back, as a concurrent writer would."""
    values['version'] = Account.version + 1
    db.session.execute(
        sa.update(Account)
        .where(Account.id == account_id)
        .values(values)
        .execution_options(synchronize_session=False)
    )


class RacingStore(AccountStore):
    """Lets a concurrent writer commit first on the initial save."""

    def __init__(self, **concurrent_values):
        self.concurrent_values = concurrent_values
        self.conflicts = 0

    def save(self, account, *related):
        if self.conflicts == 0:
            account_id = account.id
            db.session.rollback()
            _bump_version(account_id, **self.concurrent_values)
            db.session.commit()
            self.conflicts += 1
            raise ConflictError('Account', account_id)
        return super().save(account, *related)


class TestAccountStore:

    def test_load_missing_account(self, app):
        with pytest.raises(AccountNotFoundError) as exc:
            AccountStore().load('nope')
        assert exc.value.code == 'ACCOUNT_NOT_FOUND'

    def test_new_account_starts_at_version_one(self, new_business):
        assert new_business.version == 1

    def test_save_bumps_version(self, new_business):
        store = AccountStore()
        account = store.load(new_business.id)
        account.name = 'Renamed Bakery'
        store.save(account)
        assert store.load(new_business.id).version == 2

    def test_stale_save_raises_conflict(self, ready_business):
        store = AccountStore()
        account = store.load(ready_business.id)
        _bump_version(account.id)

        account.upgrade_requested = True
        with pytest.raises(ConflictError) as exc:
            store.save(account)
        assert exc.value.code == 'STATE_CONFLICT'

        assert store.load(ready_business.id).upgrade_requested is False

    def test_atomic_increment(self, new_business):
        store = AccountStore()
        assert store.atomic_increment(new_business.id, 'growth_credits', 30) == 30
        assert store.atomic_increment(new_business.id, 'growth_credits', 25) == 55

    def test_atomic_increment_bumps_version(self, new_business):
        store = AccountStore()
        store.atomic_increment(new_business.id, 'growth_credits', 30)
        assert store.load(new_business.id).version == 2

    def test_atomic_increment_rejects_other_fields(self, new_business):
        with pytest.raises(ValidationError):
            AccountStore().atomic_increment(new_business.id, 'level', 1)

    def test_atomic_increment_rejects_xp(self, new_business):
        with pytest.raises(ValidationError):
            AccountStore().atomic_increment(new_business.id, 'xp', 10)

    def test_atomic_increment_missing_account(self, app):
        with pytest.raises(AccountNotFoundError):
            AccountStore().atomic_increment('nope', 'growth_credits', 10)

    @pytest.mark.parametrize('xp,expected', [
        (0, 1), (19, 1), (20, 2), (139, 4), (140, 5), (439, 8), (440, 9), (5000, 9), (-30, 1),
    ])
    def test_add_xp_sub_level_matches_rules(self, new_business, xp, expected):
        account = AccountStore().add_xp(new_business.id, xp)
        assert account.sub_level == expected == sub_level_from_xp(xp)

    def test_add_xp_repairs_drifted_sub_level(self, new_business):
        _bump_version(new_business.id, xp=430, sub_level=1)
        db.session.commit()

        account = AccountStore().add_xp(new_business.id, 10)

        assert (account.xp, account.sub_level) == (440, 9)

    def test_add_xp_withdraws_request_below_nine(self, pending_business):
        account = AccountStore().add_xp(pending_business.id, -20)

        assert account.sub_level == 8
        assert account.upgrade_requested is False
        assert account.upgrade_requested_at is None

    def test_add_xp_keeps_request_at_nine(self, pending_business):
        account = AccountStore().add_xp(pending_business.id, -10)

        assert account.sub_level == 9
        assert account.upgrade_requested is True

    def test_add_xp_commits_audit_row_with_update(self, new_business):
        AccountStore().add_xp(
            new_business.id, 25,
            audit=lambda account: LevelChangeLog(
                account_id=account.id, change_type='xp_granted', new_sub_level=account.sub_level,
            ),
        )
        db.session.rollback()

        assert LevelChangeLog.query.filter_by(account_id=new_business.id).one().new_sub_level == 2

    def test_add_xp_missing_account(self, app):
        with pytest.raises(AccountNotFoundError):
            AccountStore().add_xp('nope', 10)

    def test_load_failure_is_data_access_error(self, new_business):
        with patch.object(db.session, 'get', side_effect=OperationalError('SELECT', {}, Exception('down'))):
            with pytest.raises(DataAccessError):
                AccountStore().load(new_business.id)

    def test_pending_upgrade_requests_oldest_first(self, pending_business, ready_business, db_session):
        ready_business.upgrade_requested = True
        ready_business.upgrade_requested_at = datetime.utcnow()
        db_session.commit()

        pending = AccountStore().pending_upgrade_requests()
        assert [a.id for a in pending] == [pending_business.id, ready_business.id]


class TestGrantXp:

    def test_grant_recomputes_sub_level(self, new_business):
        result = LevelService().grant_xp(new_business.id, 55, reason='First missions')

        assert result['success'] is True
        assert result['xp'] == 55
        assert result['sub_level'] == 3
        assert result['sub_level_changed'] is True
        assert result['level'] == 1

        stored = AccountStore().load(new_business.id)
        assert (stored.xp, stored.sub_level) == (55, 3)

    def test_grant_writes_audit_row(self, new_business):
        LevelService().grant_xp(new_business.id, 20, reason='Mission', actor='admin-1')

        log = LevelChangeLog.query.filter_by(account_id=new_business.id).one()
        assert log.change_type == 'xp_granted'
        assert log.xp_delta == 20
        assert (log.previous_sub_level, log.new_sub_level) == (1, 2)
        assert log.created_by == 'admin-1'

    def test_grants_accumulate(self, new_business):
        service = LevelService()
        service.grant_xp(new_business.id, 100)
        result = service.grant_xp(new_business.id, 340)
        assert result['xp'] == 440
        assert result['sub_level'] == 9
        assert result['can_request_upgrade'] is True

    def test_activity_xp(self, new_business):
        result = LevelService().grant_activity_xp(new_business.id, 'MEETUP_HOSTED_3_PLUS')
        assert result['xp'] == 70
        log = LevelChangeLog.query.filter_by(account_id=new_business.id).one()
        assert log.reason == 'MEETUP_HOSTED_3_PLUS'

    def test_unknown_activity(self, new_business):
        with pytest.raises(ValidationError):
            LevelService().grant_activity_xp(new_business.id, 'BAKED_BREAD')

    def test_non_integer_delta(self, new_business):
        with pytest.raises(ValidationError):
            LevelService().grant_xp(new_business.id, '10')

    def test_negative_grant_withdraws_request(self, pending_business):
        result = LevelService().grant_xp(pending_business.id, -200)

        assert result['upgrade_withdrawn'] is True
        assert result['upgrade_requested'] is False
        assert result['sub_level'] == 6

    def test_grant_to_missing_account(self, app):
        with pytest.raises(AccountNotFoundError):
            LevelService().grant_xp('nope', 10)

    def test_grant_is_consistent_when_every_save_conflicts(self, new_business):
        account_id = new_business.id

        def always_conflicts(account, *related):
            db.session.rollback()
            raise ConflictError('Account', account_id)

        store = AccountStore()
        with patch.object(store, 'save', side_effect=always_conflicts):
            result = LevelService(store=store, max_attempts=2).grant_xp(account_id, 440)

        assert (result['xp'], result['sub_level']) == (440, 9)
        stored = AccountStore().load(account_id)
        assert (stored.xp, stored.sub_level) == (440, 9)
        assert LevelService().request_upgrade(account_id).success is True


class TestUpgradeWorkflow:

    def test_request_then_approve(self, ready_business):
        service = LevelService()

        assert service.request_upgrade(ready_business.id).success is True
        result = service.approve_upgrade(ready_business.id, 'admin-1')

        assert result.success is True
        stored = AccountStore().load(ready_business.id)
        assert (stored.level, stored.sub_level, stored.xp) == (4, 1, 0)
        assert stored.upgrade_requested is False
        assert stored.last_upgrade_approved_by == 'admin-1'
        assert stored.upgrade_approved_at is not None

        change_types = [
            log.change_type for log in
            LevelChangeLog.query.filter_by(account_id=ready_business.id).order_by(LevelChangeLog.id)
        ]
        assert change_types == ['upgrade_requested', 'upgrade_approved']

    def test_request_too_early(self, new_business):
        result = LevelService().request_upgrade(new_business.id)
        assert result.failure == UpgradeFailure.SUB_LEVEL_TOO_LOW
        assert LevelChangeLog.query.count() == 0

    def test_reject_records_reason(self, pending_business):
        result = LevelService().reject_upgrade(pending_business.id, 'admin-2', 'Host one more meetup')

        assert result.success is True
        stored = AccountStore().load(pending_business.id)
        assert stored.upgrade_requested is False
        assert stored.level == 2
        assert stored.last_upgrade_rejection_reason == 'Host one more meetup'
        assert LevelChangeLog.query.filter_by(change_type='upgrade_rejected').one().created_by == 'admin-2'

    def test_reject_twice(self, pending_business):
        service = LevelService()
        assert service.reject_upgrade(pending_business.id, 'admin-2').success is True
        assert service.reject_upgrade(pending_business.id, 'admin-2').failure == UpgradeFailure.NO_PENDING_REQUEST

    def test_concurrent_duplicate_request_ends_pending(self, ready_business):
        store = RacingStore(upgrade_requested=True, upgrade_requested_at=datetime.utcnow())

        result = LevelService(store=store).request_upgrade(ready_business.id)

        assert store.conflicts == 1
        assert result.success is False
        assert result.failure == UpgradeFailure.REQUEST_ALREADY_PENDING
        assert LevelChangeLog.query.count() == 0

    def test_concurrent_approval_is_not_applied_twice(self, pending_business):
        # Another admin approved first: level 3, request cleared
        store = RacingStore(level=3, sub_level=1, xp=0, upgrade_requested=False, upgrade_requested_at=None)

        result = LevelService(store=store).approve_upgrade(pending_business.id, 'admin-1')

        assert result.failure == UpgradeFailure.NO_PENDING_REQUEST
        assert AccountStore().load(pending_business.id).level == 3

    def test_conflict_propagates_after_attempts(self, ready_business):
        account_id = ready_business.id

        def always_conflicts(account, *related):
            db.session.rollback()
            raise ConflictError('Account', account_id)

        store = AccountStore()
        with patch.object(store, 'save', side_effect=always_conflicts) as save:
            with pytest.raises(ConflictError):
                LevelService(store=store, max_attempts=2).request_upgrade(ready_business.id)
        assert save.call_count == 2

    def test_attempts_default_from_config(self, app):
        app.config['LEVEL_SAVE_ATTEMPTS'] = 5
        assert LevelService().max_attempts == 5


class TestBusinessAccountsOnly:

    def test_customer_cannot_earn_xp(self, explorer_customer):
        with pytest.raises(ValidationError) as exc:
            LevelService().grant_xp(explorer_customer.id, 440)
        assert exc.value.code == 'INVALID_ROLE'

        stored = AccountStore().load(explorer_customer.id)
        assert (stored.xp, stored.sub_level) == (0, 1)
        assert LevelChangeLog.query.count() == 0

    def test_customer_cannot_request_upgrade(self, explorer_customer, db_session):
        explorer_customer.sub_level = 9
        explorer_customer.xp = 440
        db_session.commit()

        with pytest.raises(ValidationError):
            LevelService().request_upgrade(explorer_customer.id)
        assert AccountStore().load(explorer_customer.id).upgrade_requested is False

    def test_customer_cannot_be_promoted(self, explorer_customer, db_session):
        explorer_customer.sub_level = 9
        explorer_customer.upgrade_requested = True
        db_session.commit()

        with pytest.raises(ValidationError):
            LevelService().approve_upgrade(explorer_customer.id, 'admin-1')
        assert AccountStore().load(explorer_customer.id).level == 1

    def test_customer_summary_never_offers_upgrade(self, explorer_customer, db_session):
        explorer_customer.sub_level = 9
        db_session.commit()

        assert LevelService().get_level_summary(explorer_customer.id)['can_request_upgrade'] is False


class TestLevelSummary:

    def test_summary(self, ready_business):
        summary = LevelService().get_level_summary(ready_business.id)

        assert summary['level_display'] == '3.9'
        assert summary['level_name'] == 'Operator'
        assert summary['next_level_name'] == 'Growth Leader'
        assert summary['xp_to_next_sub_level'] == 0
        assert summary['next_sub_level_xp'] is None
        assert summary['can_request_upgrade'] is True
        assert summary['is_max_level'] is False

    def test_pending_list(self, pending_business, new_business):
        pending = LevelService().pending_upgrade_requests()
        assert [p['id'] for p in pending] == [pending_business.id]
