from datetime import timedelta

from app.utils.time import coerce_datetime, iso_now, split_minutes_seconds, utc_now


def test_coerce_datetime_parses_z_suffix():
    dt = coerce_datetime("2026-01-01T00:00:00Z")
    assert dt is not None
    assert dt.tzinfo is not None
    assert dt.utcoffset() == timedelta(0)
    assert dt.isoformat().endswith("+00:00")


def test_coerce_datetime_parses_offset():
    dt = coerce_datetime("2026-01-01T02:00:00+02:00")
    assert dt is not None
    assert dt.tzinfo is not None
    assert dt.utcoffset() == timedelta(0)
    assert dt.hour == 0


def test_coerce_datetime_parses_naive_as_utc():
    dt = coerce_datetime("2026-01-01T00:00:00")
    assert dt is not None
    assert dt.tzinfo is not None
    assert dt.utcoffset() == timedelta(0)

    time_diff = utc_now() - dt
    assert isinstance(time_diff, timedelta)


def test_coerce_datetime_accepts_sqlite_timestamp():
    dt = coerce_datetime("2026-03-04 05:06:07")
    assert dt is not None
    assert (dt.year, dt.month, dt.day, dt.hour) == (2026, 3, 4, 5)
    assert dt.utcoffset() == timedelta(0)


def test_coerce_datetime_rejects_garbage():
    assert coerce_datetime("not a date") is None
    assert coerce_datetime("") is None
    assert coerce_datetime(12345) is None


def test_iso_now_honours_timespec():
    stamp = iso_now(timespec="seconds")
    assert "." not in stamp
    assert stamp.endswith("+00:00")


def test_split_minutes_seconds_rounds_up():
    assert split_minutes_seconds(299) == (4, 59)
    assert split_minutes_seconds(298.2) == (4, 59)
    assert split_minutes_seconds(300) == (5, 0)
    assert split_minutes_seconds(0.1) == (0, 1)
    assert split_minutes_seconds(-3) == (0, 0)
