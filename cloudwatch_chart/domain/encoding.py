"""
Extended text encoding for chart data series.

Each value is scaled against a maximum to an integer in ``[0, 4095]`` and
written as two characters of a 64-symbol alphabet (base-64 positional
digits). Out-of-range values use two-character markers: ``..`` above the
range (it is also the top symbol pair, so overflow clamps to the maximum) and
``__`` below it (also used for NaN, i.e. missing values).
"""

import math
from typing import Iterable, Optional

EXTENDED_MAP = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-."
EXTENDED_MAP_LENGTH = len(EXTENDED_MAP)
EXTENDED_RANGE = EXTENDED_MAP_LENGTH * EXTENDED_MAP_LENGTH

OVERFLOW_MARKER = ".."
UNDERFLOW_MARKER = "__"


def _check_max_value(max_value: float) -> None:
    if not math.isfinite(max_value) or max_value <= 0:
        raise ValueError(f"max_value must be a positive finite number, got {max_value!r}")


def encode_value(value: float, max_value: float) -> str:
    """
    Encode one value as two characters scaled against ``max_value``.

    Examples
    --------
    >>> encode_value(2, 4)
    'gA'
    >>> encode_value(5, 4)
    '..'
    >>> encode_value(-1, 4)
    '__'
    """
    _check_max_value(max_value)
    if math.isnan(value):
        return UNDERFLOW_MARKER
    if math.isinf(value):
        return OVERFLOW_MARKER if value > 0 else UNDERFLOW_MARKER

    scaled = math.floor(EXTENDED_RANGE * value / max_value)
    if scaled > EXTENDED_RANGE - 1:
        return OVERFLOW_MARKER
    if scaled < 0:
        return UNDERFLOW_MARKER

    quotient, remainder = divmod(scaled, EXTENDED_MAP_LENGTH)
    return EXTENDED_MAP[quotient] + EXTENDED_MAP[remainder]


def extended_encode(values: Iterable[float], max_value: float) -> str:
    """
    Encode a sequence of values, two characters per value.

    Parameters
    ----------
    values : Iterable[float]
        Series values, normally non-negative.
    max_value : float
        Value mapped to the top of the range; must be positive.

    Returns
    -------
    str
        Encoded series, ``2 * len(values)`` characters long.

    Raises
    ------
    ValueError
        If ``max_value`` is zero, negative or not finite.
    """
    _check_max_value(max_value)
    return "".join(encode_value(float(v), max_value) for v in values)


def decode_value(pair: str, max_value: float) -> Optional[float]:
    """
    Decode a two-character pair back to the bottom of its value bin.

    Returns None for the underflow (missing value) marker.

    Examples
    --------
    >>> decode_value("gA", 4)
    2.0
    """
    if len(pair) != 2:
        raise ValueError(f"encoded value must be two characters, got {pair!r}")
    if pair == UNDERFLOW_MARKER:
        return None
    try:
        quotient = EXTENDED_MAP.index(pair[0])
        remainder = EXTENDED_MAP.index(pair[1])
    except ValueError as exc:
        raise ValueError(f"invalid encoded value {pair!r}") from exc
    return (quotient * EXTENDED_MAP_LENGTH + remainder) / EXTENDED_RANGE * max_value
