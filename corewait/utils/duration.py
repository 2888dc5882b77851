from datetime import timedelta

_MICROS_PER_MILLI = 1_000
_MICROS_PER_SECOND = 1_000_000
_MICROS_PER_MINUTE = 60 * _MICROS_PER_SECOND
_MICROS_PER_HOUR = 60 * _MICROS_PER_MINUTE


def format_duration(value: timedelta) -> str:
    """Render a duration the compact way service logs print them.

    Examples:
    - timedelta(milliseconds=35) -> "35ms"
    - timedelta(seconds=45) -> "45s"
    - timedelta(seconds=90) -> "1m30s"
    - timedelta(hours=1) -> "1h0m0s"
    """
    micros = abs(value // timedelta(microseconds=1))
    sign = "-" if value < timedelta(0) else ""

    if micros == 0:
        return "0s"
    if micros < _MICROS_PER_MILLI:
        return f"{sign}{micros}µs"
    if micros < _MICROS_PER_SECOND:
        return f"{sign}{_trim(micros / _MICROS_PER_MILLI)}ms"

    hours, rest = divmod(micros, _MICROS_PER_HOUR)
    minutes, rest = divmod(rest, _MICROS_PER_MINUTE)
    seconds = _trim(rest / _MICROS_PER_SECOND)

    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def _trim(number: float) -> str:
    return f"{number:.6f}".rstrip("0").rstrip(".")
