"""
Business level tables.

Businesses progress on two axes:

1. Main level (1-6), admin-approved only:
   1 Explorer, 2 Builder, 3 Operator, 4 Growth Leader, 5 Expert, 6 Elite
2. Sub-level (1-9), automatic from XP within the current main level.

When the sub-level reaches 9 the business may request promotion to the next
main level.
"""
from enum import Enum

MIN_LEVEL = 1
MAX_LEVEL = 6
MAX_SUB_LEVEL = 9

BUSINESS_LEVELS = {
    1: {'name': 'Explorer', 'description': 'Wants to start a business'},
    2: {'name': 'Builder', 'description': 'Developing first business'},
    3: {'name': 'Operator', 'description': 'Running a young business'},
    4: {'name': 'Growth Leader', 'description': 'Scaling'},
    5: {'name': 'Expert', 'description': 'Experienced'},
    6: {'name': 'Elite', 'description': 'Top-tier'},
}

# Cumulative XP needed to reach sub-levels .1 through .9
SUB_LEVEL_THRESHOLDS = (0, 20, 50, 90, 140, 200, 270, 350, 440)


class XpActivity(str, Enum):
    """Activities that grant business XP."""

    MISSION_CREATED_FIRST = 'MISSION_CREATED_FIRST'
    MISSION_CREATED = 'MISSION_CREATED'
    MISSION_COMPLETED = 'MISSION_COMPLETED'
    GOOGLE_REVIEW_MISSION = 'GOOGLE_REVIEW_MISSION'
    MEETUP_HOSTED = 'MEETUP_HOSTED'
    MEETUP_HOSTED_3_PLUS = 'MEETUP_HOSTED_3_PLUS'  # 3+ attendees
    EVENT_HOSTED = 'EVENT_HOSTED'
    EVENT_HOSTED_5_PLUS = 'EVENT_HOSTED_5_PLUS'  # 5+ attendees


XP_REWARDS = {
    XpActivity.MISSION_CREATED_FIRST: 50,
    XpActivity.MISSION_CREATED: 30,
    XpActivity.MISSION_COMPLETED: 30,
    XpActivity.GOOGLE_REVIEW_MISSION: 20,
    XpActivity.MEETUP_HOSTED: 40,
    XpActivity.MEETUP_HOSTED_3_PLUS: 70,
    XpActivity.EVENT_HOSTED: 40,
    XpActivity.EVENT_HOSTED_5_PLUS: 100,
}


def level_name(level: int) -> str:
    """Level name for a main level, 'Unknown' outside 1-6."""
    return BUSINESS_LEVELS.get(level, {}).get('name', 'Unknown')


def level_display(level: int, sub_level: int) -> str:
    """Display string such as '3.4' for Operator, sub-level 4."""
    return f'{level}.{sub_level}'


def xp_for_activity(activity) -> int:
    """XP granted for an activity; accepts the enum or its name."""
    return XP_REWARDS[XpActivity(activity)]
