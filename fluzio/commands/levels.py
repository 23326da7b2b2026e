"""
CLI Commands for Business Levels.

Admin tooling for the upgrade queue and manual XP adjustments:

    flask levels pending
    flask levels approve <account_id> --admin-id=ops
    flask levels reject <account_id> --admin-id=ops --reason="Needs more missions"
    flask levels grant-xp <account_id> 40 --reason="Manual correction"
    flask levels grant-xp <account_id> --activity=MEETUP_HOSTED
    flask levels show <account_id>
"""

import click
from flask.cli import with_appcontext

from ..services.level_service import LevelService
from ..utils.exceptions import FluzioError


@click.group('levels')
def levels_cli():
    """Business level commands."""
    pass


def _echo_result(account_id, action, result):
    if result.success:
        line = f"{action} for {account_id}: OK"
        if result.new_level is not None:
            line += f" (now {result.new_level}.{result.new_sub_level})"
        click.echo(line)
    else:
        click.echo(f"{action} for {account_id} refused: {result.failure.value} - {result.error}")


@levels_cli.command('pending')
@with_appcontext
def pending_requests():
    """List pending upgrade requests, oldest first."""
    requests = LevelService().pending_upgrade_requests()
    if not requests:
        click.echo("No pending upgrade requests")
        return

    for summary in requests:
        click.echo(
            f"{summary['id']}  {summary['name'] or '-'}  "
            f"level {summary['level_display']} ({summary['level_name']})  "
            f"requested {summary['upgrade_requested_at']}"
        )
    click.echo(f"\nTOTAL: {len(requests)}")


@levels_cli.command('approve')
@click.argument('account_id')
@click.option('--admin-id', required=True, help='Admin recorded as approver')
@with_appcontext
def approve(account_id, admin_id):
    """Approve a pending upgrade request."""
    try:
        result = LevelService().approve_upgrade(account_id, admin_id)
    except FluzioError as e:
        raise click.ClickException(e.message)
    _echo_result(account_id, 'Approve', result)


@levels_cli.command('reject')
@click.argument('account_id')
@click.option('--admin-id', required=True, help='Admin recorded as rejecter')
@click.option('--reason', default=None, help='Reason shown to the business')
@with_appcontext
def reject(account_id, admin_id, reason):
    """Reject a pending upgrade request."""
    try:
        result = LevelService().reject_upgrade(account_id, admin_id, reason)
    except FluzioError as e:
        raise click.ClickException(e.message)
    _echo_result(account_id, 'Reject', result)


@levels_cli.command('grant-xp')
@click.argument('account_id')
@click.argument('delta', type=int, required=False)
@click.option('--activity', default=None, help='XP activity, e.g. MEETUP_HOSTED')
@click.option('--reason', default=None, help='Reason stored in the audit log')
@with_appcontext
def grant_xp(account_id, delta, activity, reason):
    """Grant XP by amount or by activity."""
    service = LevelService()
    try:
        if activity:
            result = service.grant_activity_xp(account_id, activity, actor='cli')
        elif delta is not None:
            result = service.grant_xp(account_id, delta, reason=reason, actor='cli')
        else:
            raise click.UsageError('Provide DELTA or --activity')
    except FluzioError as e:
        raise click.ClickException(e.message)

    click.echo(
        f"{account_id}: {result['xp_delta']:+d} XP -> level {result['level_display']} ({result['xp']} XP)"
    )
    if result['upgrade_withdrawn']:
        click.echo("  Pending upgrade request withdrawn")


@levels_cli.command('show')
@click.argument('account_id')
@with_appcontext
def show(account_id):
    """Show an account's level summary."""
    try:
        summary = LevelService().get_level_summary(account_id)
    except FluzioError as e:
        raise click.ClickException(e.message)

    click.echo(f"Account: {summary['id']}")
    click.echo(f"  Level: {summary['level_display']} ({summary['level_name']})")
    click.echo(f"  XP: {summary['xp']} ({summary['xp_to_next_sub_level']} to next sub-level)")
    click.echo(f"  Tier: {summary['tier']}")
    click.echo(f"  Upgrade requested: {'yes' if summary['upgrade_requested'] else 'no'}")
    click.echo(f"  Can request upgrade: {'yes' if summary['can_request_upgrade'] else 'no'}")


def init_app(app):
    """Register CLI commands with the Flask app."""
    app.cli.add_command(levels_cli)
