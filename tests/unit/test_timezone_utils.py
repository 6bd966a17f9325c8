from datetime import datetime, timezone

import pytz

from app.core.config import get_settings
from app.core.timezone_utils import (
    get_current_time_in_gym_timezone,
    get_today_in_gym_timezone,
    resolve_gym_timezone,
)


def test_today_follows_gym_timezone():
    tz = 'Pacific/Kiritimati'  # UTC+14
    expected = datetime.now(timezone.utc).astimezone(pytz.timezone(tz)).date()
    assert get_today_in_gym_timezone(tz) == expected


def test_current_time_is_aware_and_in_gym_zone():
    tz = 'America/New_York'
    now_local = get_current_time_in_gym_timezone(tz)
    assert now_local.tzinfo is not None
    assert now_local.tzinfo.zone == tz


def test_resolve_defaults_to_configured_timezone():
    assert resolve_gym_timezone('Asia/Tokyo') == 'Asia/Tokyo'
    assert resolve_gym_timezone() == get_settings().GYM_TIMEZONE
