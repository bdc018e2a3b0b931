"""Unit tests for the timecode engine."""

import random

import pytest

from notemarker.core.frame_rates import FRAME_RATES
from notemarker.core.models import TimecodeValue
from notemarker.core.timecode_calc import (
    TimecodeCalculator,
    add,
    duration,
    format_timecode,
    frame_distance,
    from_frame_count,
    offset,
    parse,
    to_frame_count,
    validate,
)
from notemarker.utils.exceptions import (
    CalculationError,
    InvalidFormatError,
    InvalidRangeError,
    ProfileMismatchError,
    TimecodeError,
)


class TestParse:
    def test_parses_components(self, ndf):
        result = parse("01:02:03:04", ndf)
        assert result.components == (1, 2, 3, 4)
        assert result.profile is ndf

    def test_single_digit_hours(self, ndf):
        assert parse("1:00:00:00", ndf) == TimecodeValue(1, 0, 0, 0)

    def test_surrounding_whitespace(self, ndf):
        assert parse("  00:00:10:00 ", ndf) == TimecodeValue(0, 0, 10, 0)

    @pytest.mark.parametrize("text", ["01:02:03", "aa:bb:cc:dd", "", "   ", "01:02:03;04", "01:02:03:04:05"])
    def test_invalid_format(self, text, ndf):
        with pytest.raises(InvalidFormatError):
            parse(text, ndf)

    def test_non_string_is_invalid_format(self, ndf):
        with pytest.raises(InvalidFormatError):
            parse(None, ndf)

    def test_range_error_lists_every_field(self, ndf):
        with pytest.raises(InvalidRangeError) as exc_info:
            parse("25:61:00:00", ndf)

        assert exc_info.value.fields == ["hours", "minutes"]
        assert "Hours 25" in str(exc_info.value)
        assert "Minutes 61" in str(exc_info.value)
        assert exc_info.value.code == "INVALID_RANGE"

    def test_frames_bounded_by_profile(self):
        with pytest.raises(InvalidRangeError) as exc_info:
            parse("00:00:00:25", FRAME_RATES["25"])
        assert exc_info.value.fields == ["frames"]

        assert parse("00:00:00:59", FRAME_RATES["60"]).frames == 59

    def test_format_pads(self):
        assert format_timecode(TimecodeValue(1, 2, 3, 4)) == "01:02:03:04"
        assert str(TimecodeValue(0, 0, 10, 0)) == "00:00:10:00"


class TestValidate:
    def test_valid(self, ndf):
        result = validate("00:00:10:00", ndf)
        assert result.valid
        assert result.timecode == TimecodeValue(0, 0, 10, 0)
        assert result.message is None

    def test_invalid_does_not_raise(self, ndf):
        result = validate("00:00:99:00", ndf)
        assert not result.valid
        assert isinstance(result.error, InvalidRangeError)
        assert "Seconds 99" in result.message


class TestFrameCount:
    def test_non_drop(self, ndf):
        assert to_frame_count(parse("00:00:01:00", ndf), ndf) == 30
        assert to_frame_count(parse("01:00:00:00", ndf), ndf) == 108000

    @pytest.mark.parametrize(
        "text, frames",
        [
            ("00:00:59:29", 1799),
            ("00:01:00:02", 1800),
            ("00:10:00:00", 17982),
            ("01:00:00:00", 107892),
        ],
    )
    def test_drop_frame(self, df, text, frames):
        assert to_frame_count(parse(text, df), df) == frames

    @pytest.mark.parametrize(
        "frames, text",
        [
            (1799, "00:00:59:29"),
            (1800, "00:01:00:02"),
            (17982, "00:10:00:00"),
            (107892, "01:00:00:00"),
        ],
    )
    def test_drop_frame_inverse(self, df, frames, text):
        assert str(from_frame_count(frames, df).timecode) == text

    def test_drop_frame_inverse_is_exact(self, df):
        for frames in range(0, 40000, 7):
            converted = from_frame_count(frames, df).timecode
            assert to_frame_count(converted, df) == frames

    def test_drop_frame_never_labels_dropped_frames(self, df):
        for frames in range(0, 20000, 3):
            converted = from_frame_count(frames, df).timecode
            if converted.seconds == 0 and converted.minutes % 10:
                assert converted.frames >= 2

    def test_matches_reference_library(self, df):
        timecode = pytest.importorskip("timecode")
        for text in ("00:00:59;29", "00:01:00;02", "00:09:59;29", "00:10:00;00", "01:23:45;12"):
            expected = timecode.Timecode("29.97", text).frames - 1
            assert to_frame_count(parse(text.replace(";", ":"), df), df) == expected

    def test_negative_frame_count(self, ndf):
        with pytest.raises(CalculationError):
            from_frame_count(-1, ndf)

    def test_day_overflow(self, ndf):
        converted = from_frame_count(ndf.frames_per_day + 30, ndf)
        assert converted.day_overflow == 1
        assert str(converted.timecode) == "00:00:01:00"

    def test_profile_mismatch(self, ndf):
        value = parse("00:00:10:00", FRAME_RATES["25"])
        with pytest.raises(ProfileMismatchError):
            to_frame_count(value, ndf)

    def test_unprofiled_value_checked_against_profile(self):
        with pytest.raises(InvalidRangeError):
            to_frame_count(TimecodeValue(0, 0, 0, 29), FRAME_RATES["25"])

    def test_unprofiled_value_takes_the_given_profile(self):
        assert to_frame_count(TimecodeValue(0, 0, 1, 0), FRAME_RATES["25"]) == 25
        assert to_frame_count(TimecodeValue(0, 0, 1, 0), FRAME_RATES["60"]) == 60


class TestArithmetic:
    def test_add_session_start(self, tc, ndf):
        total = add(tc("00:03:30:12"), tc("01:00:00:00"), ndf)
        assert str(total.result) == "01:03:30:12"
        assert total.day_overflow == 0

    def test_add_wraps_midnight(self, tc, ndf):
        total = add(tc("23:59:59:29"), tc("00:00:00:01"), ndf)
        assert str(total.result) == "00:00:00:00"
        assert total.day_overflow == 1

    def test_add_drop_frame(self, df):
        total = add(parse("00:00:59:29", df), parse("00:00:00:01", df), df)
        assert str(total.result) == "00:01:00:02"

    def test_offset(self, tc, ndf):
        assert str(offset(tc("00:01:00:00"), 30, ndf).timecode) == "00:01:01:00"
        assert str(offset(tc("00:01:00:00"), -30, ndf).timecode) == "00:00:59:00"

    def test_offset_before_zero(self, tc, ndf):
        with pytest.raises(CalculationError):
            offset(tc("00:00:00:10"), -11, ndf)

    def test_duration(self, tc, ndf):
        result = duration(tc("00:00:10:00"), tc("00:00:12:15"), ndf)
        assert result.frames == 75
        assert str(result.duration) == "00:00:02:15"
        assert not result.crosses_midnight

    def test_duration_across_midnight(self):
        fps30 = FRAME_RATES["30"]
        result = duration(parse("23:59:59:00", fps30), parse("00:00:01:00", fps30), fps30)
        assert result.crosses_midnight
        assert result.frames == 60
        assert str(result.duration) == "00:00:02:00"

    def test_frame_distance_is_symmetric(self, tc, ndf):
        a, b = tc("00:01:00:00"), tc("00:01:00:10")
        assert frame_distance(a, b, ndf) == frame_distance(b, a, ndf) == 10


class TestTimecodeCalculator:
    def test_bound_profile(self):
        calc = TimecodeCalculator("29.97drop")
        assert calc.frame_rate == "29.97drop"
        assert calc.fps == 30
        assert calc.to_frame_count(calc.parse("00:01:00:02")) == 1800

    def test_parse_lenient_accepts_semicolon(self):
        calc = TimecodeCalculator("29.97drop")
        assert calc.parse_lenient("00:01:00;02") == TimecodeValue(0, 1, 0, 2)

    def test_parse_is_strict(self):
        with pytest.raises(InvalidFormatError):
            TimecodeCalculator("29.97drop").parse("00:01:00;02")

    def test_frames_to_seconds(self):
        assert TimecodeCalculator("25").frames_to_seconds(50) == 2.0

    def test_unsupported_rate(self):
        with pytest.raises(TimecodeError):
            TimecodeCalculator("48")


ALL_PROFILES = sorted(FRAME_RATES)
NON_DROP_PROFILES = [key for key in ALL_PROFILES if not FRAME_RATES[key].drop_frame]


def last_frame_count(profile):
    fps = profile.integer_fps
    return to_frame_count(TimecodeValue(23, 59, 59, fps - 1), profile)


def random_timecodes(profile, count, seed, upper=None):
    """Valid labels for a profile, drawn from frame counts so drop-frame gaps are never produced."""
    rng = random.Random(seed)
    upper = last_frame_count(profile) if upper is None else upper
    return [from_frame_count(rng.randint(0, upper), profile).timecode for _ in range(count)]


class TestIdentities:
    @pytest.mark.parametrize("key", ALL_PROFILES)
    def test_format_parse_round_trip(self, key):
        profile = FRAME_RATES[key]
        fps = profile.integer_fps
        samples = [f"{h:02d}:{m:02d}:{s:02d}:{f:02d}" for h, m, s, f in [(0, 0, 0, 0), (23, 59, 59, fps - 1), (1, 0, 10, 0)]]
        samples += [format_timecode(tc) for tc in random_timecodes(profile, 200, seed=7)]

        for text in samples:
            assert format_timecode(parse(text, profile)) == text

    @pytest.mark.parametrize("key", NON_DROP_PROFILES)
    def test_add_matches_frame_counts(self, key):
        profile = FRAME_RATES[key]
        firsts = random_timecodes(profile, 300, seed=11)
        seconds = random_timecodes(profile, 300, seed=12)

        for a, b in zip(firsts, seconds):
            total = to_frame_count(a, profile) + to_frame_count(b, profile)
            result = add(a, b, profile).result
            assert to_frame_count(result, profile) == total % profile.frames_per_day

    @pytest.mark.parametrize("key", ALL_PROFILES)
    def test_duration_inverts_add(self, key):
        profile = FRAME_RATES[key]
        rng = random.Random(21)
        last = last_frame_count(profile)

        for _ in range(300):
            length = rng.randint(0, last)
            start_frames = rng.randint(0, last - length)
            start = from_frame_count(start_frames, profile).timecode
            length_tc = from_frame_count(length, profile).timecode

            total = add(start, length_tc, profile)
            assert total.day_overflow == 0

            result = duration(start, total.result, profile)
            assert result.duration == length_tc
            assert result.frames == length
            assert not result.crosses_midnight

    @pytest.mark.parametrize("key", ALL_PROFILES)
    def test_frame_count_round_trip(self, key):
        profile = FRAME_RATES[key]
        for tc in random_timecodes(profile, 300, seed=31):
            assert from_frame_count(to_frame_count(tc, profile), profile).timecode == tc


class TestDropFrame5994:
    @pytest.fixture
    def df60(self):
        return FRAME_RATES["59.94drop"]

    def test_minute_boundaries(self, df60):
        assert to_frame_count(parse("00:01:00:02", df60), df60) == 3600
        assert to_frame_count(parse("00:10:00:00", df60), df60) == 35982
        assert str(from_frame_count(3599, df60).timecode) == "00:00:59:59"
        assert str(from_frame_count(3600, df60).timecode) == "00:01:00:02"

    def test_every_count_in_two_hours(self, df60):
        end = to_frame_count(parse("02:00:00:00", df60), df60)

        for frames in range(end + 1):
            assert to_frame_count(from_frame_count(frames, df60).timecode, df60) == frames

    def test_add_and_offset(self, df60):
        total = add(parse("00:00:59:59", df60), parse("00:00:00:01", df60), df60)
        assert str(total.result) == "00:01:00:02"
        assert str(offset(parse("00:01:00:02", df60), -1, df60).timecode) == "00:00:59:59"

    def test_duration_over_dropped_labels(self, df60):
        result = duration(parse("00:00:59:58", df60), parse("00:01:00:03", df60), df60)
        assert result.frames == 3
