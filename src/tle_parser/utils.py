"""
Utility functions for the TLE parser.

This module provides logging setup and the small numeric and epoch
conversions shared by the heuristics, the record model and batch filters.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union
import logging
import math
import os
import re

logger = logging.getLogger(__name__)

# Two-digit epoch years 57-99 belong to the 1900s, 00-56 to the 2000s
EPOCH_CENTURY_PIVOT = 57

_ASSUMED_DECIMAL_RE = re.compile(r"^([+-]?)(\d+)\s*([+-]?)\s*(\d)$", re.ASCII)

# ASCII decimal notation only; float() also accepts "5_1" and non-ASCII digits
_NUMBER_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path

    Environment Variables:
        TLE_PARSER_LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_level = os.environ.get("TLE_PARSER_LOG_LEVEL")
    if env_level:
        level = env_level
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logger.info(f"Logging configured at {level} level")


def get_current_utc() -> datetime:
    """
    Get current UTC datetime.

    Returns:
        Current UTC datetime (timezone-naive)
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def full_epoch_year(two_digit_year: int) -> int:
    """
    Expand a two-digit TLE epoch year to a full year.

    Args:
        two_digit_year: Year value 0-99 from the epoch field

    Returns:
        Four-digit year (1957-2056)
    """
    if two_digit_year >= EPOCH_CENTURY_PIVOT:
        return 1900 + two_digit_year
    return 2000 + two_digit_year


def epoch_to_datetime(epoch_year: Union[str, int], epoch_day: Union[str, float]) -> datetime:
    """
    Convert a TLE epoch (two-digit year + fractional day of year) to a datetime.

    Day 1.0 is midnight on January 1st.

    Args:
        epoch_year: Two-digit epoch year
        epoch_day: Fractional day of year

    Returns:
        Naive UTC datetime

    Raises:
        ValueError: If either part is not numeric
    """
    year_text = str(epoch_year).strip()
    day_text = str(epoch_day).strip()
    if not (year_text.isascii() and year_text.isdigit()) or not is_numeric_text(day_text):
        raise ValueError(f"Epoch must be numeric, got {epoch_year!r} / {epoch_day!r}")
    year = int(year_text)
    day = float(day_text)
    if not math.isfinite(day):
        raise ValueError(f"Epoch day must be finite, got {epoch_day!r}")
    try:
        return datetime(full_epoch_year(year), 1, 1) + timedelta(days=day - 1)
    except OverflowError as e:
        raise ValueError(f"Epoch day out of range: {epoch_day!r}") from e


def is_numeric_text(text: str) -> bool:
    """Return True if text is a plain ASCII decimal or exponent number."""
    return _NUMBER_RE.fullmatch(text) is not None


def parse_number(value: Optional[str]) -> Optional[float]:
    """
    Parse a TLE field as a finite float.

    Returns None for blank, non-numeric or non-finite values.
    """
    if value is None:
        return None
    text = value.strip()
    if not is_numeric_text(text):
        return None
    number = float(text)
    if not math.isfinite(number):
        return None
    return number


def parse_assumed_decimal(value: Optional[str]) -> Optional[float]:
    """
    Decode an assumed-decimal exponent field such as the B* term.

    ``"-11606-4"`` means ``-0.11606e-4``; ``"00000-0"`` and ``"00000+0"``
    decode to zero.
    """
    if value is None:
        return None
    match = _ASSUMED_DECIMAL_RE.match(value.strip())
    if not match:
        return None
    sign, mantissa, exp_sign, exponent = match.groups()
    number = float(f"0.{mantissa}") * 10 ** int(f"{exp_sign or '+'}{exponent}")
    return -number if sign == "-" else number
