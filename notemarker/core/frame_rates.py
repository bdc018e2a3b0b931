"""
Frame rate profiles supported by the timecode engine.

Profiles are looked up by the keys review tools and users type
("29.97", "29.97drop", "23.98", ...) or by the timecode-rate names the
timeline application reports for a session ("Fps2997Drop", ...).
"""

from __future__ import annotations

from notemarker.core.models import FrameRateProfile
from notemarker.utils.exceptions import UnsupportedFrameRateError

# ============================================================================
# Supported rates
# ============================================================================

NOMINAL_RATES = (23.976, 24.0, 25.0, 29.97, 30.0, 50.0, 59.94, 60.0)
DROP_FRAME_RATES = (29.97, 59.94)

FRAME_RATES: dict[str, FrameRateProfile] = {
    "23.976": FrameRateProfile("23.976", 23.976, False, 24),
    "24": FrameRateProfile("24", 24.0, False, 24),
    "25": FrameRateProfile("25", 25.0, False, 25),
    "29.97": FrameRateProfile("29.97", 29.97, False, 30),
    "29.97drop": FrameRateProfile("29.97drop", 29.97, True, 30),
    "30": FrameRateProfile("30", 30.0, False, 30),
    "50": FrameRateProfile("50", 50.0, False, 50),
    "59.94": FrameRateProfile("59.94", 59.94, False, 60),
    "59.94drop": FrameRateProfile("59.94drop", 59.94, True, 60),
    "60": FrameRateProfile("60", 60.0, False, 60),
}

# Alternate spellings accepted on input
FRAME_RATE_ALIASES = {
    "23.98": "23.976",
    "29.97df": "29.97drop",
    "29.97nd": "29.97",
    "59.94df": "59.94drop",
    "59.94nd": "59.94",
}

# Session timecode-rate names reported by the timeline application
SESSION_RATE_NAMES = {
    "Fps23976": "23.976",
    "Fps24": "24",
    "Fps25": "25",
    "Fps2997": "29.97",
    "Fps2997Drop": "29.97drop",
    "Fps30": "30",
    "Fps50": "50",
    "Fps5994": "59.94",
    "Fps5994Drop": "59.94drop",
    "Fps60": "60",
}

DEFAULT_PROFILE = FRAME_RATES["29.97"]


def supported_frame_rates() -> list[str]:
    """Return the keys of all supported profiles."""
    return list(FRAME_RATES)


def get_profile(frame_rate: str | float | FrameRateProfile) -> FrameRateProfile:
    """
    Resolve a frame rate key, number or profile to a profile.

    Args:
        frame_rate: Key ("29.97drop"), alias ("23.98", "29.97DF"), number
                    (25, 29.97) or an existing profile

    Returns:
        The matching FrameRateProfile

    Raises:
        UnsupportedFrameRateError: If the rate is not supported

    Examples:
        "29.97drop" -> 29.97 fps, drop-frame, 30 frames per second
        24 -> 24 fps, non-drop
    """
    if isinstance(frame_rate, FrameRateProfile):
        return validate_profile(frame_rate)

    if isinstance(frame_rate, bool):
        raise UnsupportedFrameRateError(frame_rate, supported_frame_rates())

    if isinstance(frame_rate, (int, float)):
        key = f"{frame_rate:g}"
    else:
        key = str(frame_rate).strip().lower().replace(" ", "")

    key = FRAME_RATE_ALIASES.get(key, key)
    if key not in FRAME_RATES:
        raise UnsupportedFrameRateError(frame_rate, supported_frame_rates())

    return FRAME_RATES[key]


def profile_from_session_rate(rate_name: str) -> FrameRateProfile:
    """
    Map a session timecode-rate name to a profile.

    Args:
        rate_name: Rate name such as "Fps2997Drop"

    Returns:
        The matching FrameRateProfile

    Raises:
        UnsupportedFrameRateError: If the name is unknown (e.g. "Fps30Drop")
    """
    key = SESSION_RATE_NAMES.get(rate_name)
    if key is None:
        raise UnsupportedFrameRateError(rate_name, list(SESSION_RATE_NAMES))
    return FRAME_RATES[key]


def validate_profile(profile: FrameRateProfile) -> FrameRateProfile:
    """
    Check that a hand-built profile is a supported combination.

    Raises:
        UnsupportedFrameRateError: If the nominal rate, drop-frame flag and
                                   integer rate do not belong together
    """
    if profile.nominal_fps not in NOMINAL_RATES:
        raise UnsupportedFrameRateError(profile.nominal_fps, supported_frame_rates())

    if profile.drop_frame and profile.nominal_fps not in DROP_FRAME_RATES:
        raise UnsupportedFrameRateError(f"{profile.nominal_fps:g}drop", supported_frame_rates())

    if profile.integer_fps != round(profile.nominal_fps):
        raise UnsupportedFrameRateError(
            f"{profile.nominal_fps:g} with {profile.integer_fps} frames per second",
            supported_frame_rates(),
        )

    return profile
