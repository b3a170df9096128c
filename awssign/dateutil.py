"""
Datetime parse and format utilities for request timestamps.
"""
from datetime import datetime
from pytz import FixedOffset, UTC
from re import compile as re_compile

# Month-name to month-value map
_month_names = {
    "Jan": 1,
    "Feb": 2,
    "Mar": 3,
    "Apr": 4,
    "May": 5,
    "Jun": 6,
    "Jul": 7,
    "Aug": 8,
    "Sep": 9,
    "Oct": 10,
    "Nov": 11,
    "Dec": 12,
}

# Month-value to month-name map
_month_abbrevs = dict([(value, key) for key, value in _month_names.items()])

# datetime.weekday() to day-name
_weekday_abbrevs = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Zone names accepted in place of a numeric offset
_utc_zone_names = ("GMT", "UTC", "UT", "Z")

# ISO 8601 timestamp format regex (includes RFC 3339 and the AWS basic form)
_iso_8601_regex = re_compile(
    r"^(?P<year>[0-9]{4})-?"
    r"(?P<month>0[1-9]|1[0-2])-?"
    r"(?P<day>0[1-9]|[12][0-9]|3[01])"
    r"[Tt ]"
    r"(?P<hour>[01][0-9]|2[0-3]):?"
    r"(?P<minute>[0-5][0-9]):?"
    r"(?P<second>[0-5][0-9])"
    r"(?P<frac_sec>[\.,][0-9]+)?"
    r"(?P<timezone>[-+][01][0-9]:?[0-5][0-9]|[Zz])$")

# RFC 1123 timestamp format regex. The weekday is matched but never checked
# against the date; the AWS test suite carries inconsistent pairs.
_rfc_1123_regex = re_compile(
    r"^(?:(?P<dow>[A-Za-z]{3})\s*,)?\s*"
    r"(?P<day>[0-9]|0[1-9]|1[0-9]|2[0-9]|3[01])\s+"
    r"(?P<month>Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+"
    r"(?P<year>[0-9]{4})\s+"
    r"(?P<hour>[01][0-9]|2[0-3]):"
    r"(?P<minute>[0-5][0-9]):"
    r"(?P<second>[0-5][0-9])\s+"
    r"(?P<timezone>GMT|UTC|UT|Z|[-+][01][0-9][0-5][0-9])$"
)

def _offset_from_zone(zone):
    """
    Convert a "+hhmm", "-hh:mm", "Z", or "GMT" zone string into a tzinfo.
    """
    if zone.upper() in _utc_zone_names:
        return UTC

    zone = zone.replace(":", "")
    assert len(zone) == 5
    sign = zone[0]
    offset_hour = int(zone[1:3])
    offset_minutes = offset_hour * 60 + int(zone[3:5])

    if sign == "-":
        offset_minutes = -offset_minutes

    if offset_minutes == 0:
        return UTC

    return FixedOffset(offset_minutes)

def parse_iso8601(s):
    """
    Parse a timestamp formatted in ISO 8601 timestamp format and return a
    datetime object. If the string is not a valid ISO 8601 timestamp, None
    is returned.

    ISO 8601 timestamps include the forms:
        20150830T123600Z                (AWS basic format)
        2015-08-30T12:36:00Z
        2015-08-30T05:36:00-07:00
        20150830T053600-0700            (Condensed)
        20150830 123600Z                (Space instead of T)

    If fractional seconds are included, they are ignored.
    """
    m = _iso_8601_regex.match(s)
    if not m:
        return None

    try:
        return datetime(
            year=int(m.group("year")),
            month=int(m.group("month")),
            day=int(m.group("day")),
            hour=int(m.group("hour")),
            minute=int(m.group("minute")),
            second=int(m.group("second")),
            tzinfo=_offset_from_zone(m.group("timezone")))
    except ValueError:
        # Day out of range for the month (e.g. 20150230).
        return None

def parse_rfc1123(s):
    """
    Parse a timestamp formatted in RFC 1123 (HTTP date) format and return a
    datetime object. If the string is not a valid RFC 1123 timestamp, None
    is returned.

    RFC 1123 timestamps are of the form:
        Sun, 30 Aug 2015 12:36:00 GMT
        Mon, 09 Sep 2011 23:36:00 -0700
        30 Aug 2015 12:36:00 GMT

    The day of the week is ignored.
    """
    m = _rfc_1123_regex.match(s)
    if not m:
        return None

    try:
        return datetime(
            year=int(m.group("year")),
            month=_month_names[m.group("month")],
            day=int(m.group("day")),
            hour=int(m.group("hour")),
            minute=int(m.group("minute")),
            second=int(m.group("second")),
            tzinfo=_offset_from_zone(m.group("timezone")))
    except ValueError:
        return None

def format_amz_date(dt):
    """
    format_amz_date(dt) -> str

    Format a datetime in the AWS basic ISO 8601 form, YYYYMMDDTHHMMSSZ.
    """
    return dt.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")

def format_amz_datestamp(dt):
    """
    format_amz_datestamp(dt) -> str

    Format the UTC date of a datetime as YYYYMMDD.
    """
    return dt.astimezone(UTC).strftime("%Y%m%d")

def format_http_date(dt):
    """
    format_http_date(dt) -> str

    Format a datetime as an RFC 1123 HTTP date, e.g.
    "Sun, 30 Aug 2015 12:36:00 GMT". Day and month names are always English,
    regardless of the current locale.
    """
    dt = dt.astimezone(UTC)
    return "%s, %02d %s %04d %02d:%02d:%02d GMT" % (
        _weekday_abbrevs[dt.weekday()], dt.day, _month_abbrevs[dt.month],
        dt.year, dt.hour, dt.minute, dt.second)

def utcnow():
    """
    The current time as a timezone-aware UTC datetime.
    """
    return datetime.now(UTC)
