"""
Parsing of human-friendly durations such as ``30s``, ``2m`` or ``1m30s``.
"""
import re
from typing import Union

_UNITS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_PART = re.compile(r'(\d+(?:\.\d+)?)(ms|s|m|h)')


def parse_duration(value: Union[str, int, float, None]) -> float:
    """
    Converts a duration into seconds.

    Numbers are taken as seconds. Strings may be a bare number or a
    sequence of ``<number><unit>`` parts with units ``ms``, ``s``, ``m``
    and ``h``.

    :param value: The duration to convert.
    :return: The duration in seconds.
    :raises ValueError: If the value cannot be parsed or is negative.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip().lower()
        if not text:
            raise ValueError("Invalid duration: empty string")
        try:
            seconds = float(text)
        except ValueError:
            pos = 0
            seconds = 0.0
            for match in _PART.finditer(text):
                if match.start() != pos:
                    raise ValueError(f"Invalid duration: {value!r}")
                seconds += float(match.group(1)) * _UNITS[match.group(2)]
                pos = match.end()
            if pos != len(text):
                raise ValueError(f"Invalid duration: {value!r}")

    if seconds < 0:
        raise ValueError(f"Duration must not be negative: {value!r}")
    return seconds
