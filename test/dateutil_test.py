#!/usr/bin/env python
from datetime import datetime, timedelta
from unittest import TestCase

from pytz import UTC

from awssign.dateutil import (
    format_amz_date, format_amz_datestamp, format_http_date, parse_iso8601,
    parse_rfc1123, utcnow)

class ISO8601(TestCase):
    expected = datetime(2015, 8, 30, 12, 36, 0, tzinfo=UTC)

    def test_basic(self):
        self.assertEqual(parse_iso8601("20150830T123600Z"), self.expected)

    def test_extended(self):
        for s in ("2015-08-30T12:36:00Z", "2015-08-30 12:36:00z",
                  "2015-08-30T12:36:00.250Z", "2015-08-30T05:36:00-07:00",
                  "20150830T143600+0200"):
            self.assertEqual(parse_iso8601(s), self.expected, s)

    def test_invalid(self):
        for s in ("", "20150830", "20150830T123600", "20151008T999999Z",
                  "20150230T000000Z", "Sun, 30 Aug 2015 12:36:00 GMT"):
            self.assertIsNone(parse_iso8601(s), s)


class RFC1123(TestCase):
    def test_gmt(self):
        self.assertEqual(
            parse_rfc1123("Sun, 30 Aug 2015 12:36:00 GMT"),
            datetime(2015, 8, 30, 12, 36, 0, tzinfo=UTC))

    def test_weekday_ignored(self):
        # 9 September 2011 was a Friday.
        self.assertEqual(
            parse_rfc1123("Mon, 09 Sep 2011 23:36:00 GMT"),
            datetime(2011, 9, 9, 23, 36, 0, tzinfo=UTC))
        self.assertEqual(
            parse_rfc1123("9 Sep 2011 23:36:00 UTC"),
            datetime(2011, 9, 9, 23, 36, 0, tzinfo=UTC))

    def test_offset(self):
        parsed = parse_rfc1123("Tue, 25 Dec 2018 14:00:00 -0800")
        self.assertEqual(parsed.astimezone(UTC),
                         datetime(2018, 12, 25, 22, 0, 0, tzinfo=UTC))

    def test_invalid(self):
        for s in ("", "Sun, 30 Foo 2015 12:36:00 GMT",
                  "Sun, 31 Feb 2015 12:36:00 GMT",
                  "Sun, 30 Aug 2015 12:36:00 PST", "20150830T123600Z"):
            self.assertIsNone(parse_rfc1123(s), s)


class Formatting(TestCase):
    def test_amz_date(self):
        dt = datetime(2015, 8, 30, 5, 36, 0, tzinfo=UTC) + timedelta(hours=7)
        self.assertEqual(format_amz_date(dt), "20150830T123600Z")
        self.assertEqual(format_amz_datestamp(dt), "20150830")

    def test_amz_date_from_offset(self):
        dt = parse_iso8601("20150830T203600-0800")
        self.assertEqual(format_amz_date(dt), "20150831T043600Z")
        self.assertEqual(format_amz_datestamp(dt), "20150831")

    def test_http_date(self):
        dt = datetime(2015, 8, 30, 12, 36, 0, tzinfo=UTC)
        self.assertEqual(format_http_date(dt), "Sun, 30 Aug 2015 12:36:00 GMT")
        self.assertEqual(parse_rfc1123(format_http_date(dt)), dt)

    def test_utcnow(self):
        now = utcnow()
        self.assertIsNotNone(now.tzinfo)
        self.assertEqual(now.utcoffset(), timedelta(0))
