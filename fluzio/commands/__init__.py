"""
CLI Commands for Fluzio.

Usage:
    flask levels pending                          # Pending upgrade requests
    flask levels approve <id> --admin-id=ops      # Approve a request
    flask levels reject <id> --admin-id=ops       # Reject a request
    flask levels grant-xp <id> 40                 # Manual XP grant
    flask levels show <id>                        # Level summary
"""
from .levels import init_app as init_level_commands


def init_app(app):
    """Register all CLI commands with the Flask app."""
    init_level_commands(app)
