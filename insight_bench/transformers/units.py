import logging
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_DECIMALS = 18


def wei_to_tokens(value: Any, decimals: int = DEFAULT_DECIMALS) -> str:
    """Convert a base-unit integer into a decimal token string without floats.

    Trailing zeros of the fraction are dropped, and a whole amount has no
    fractional part at all. Malformed input is returned unchanged.
    """
    try:
        text = str(value).strip()
        if not (text.isascii() and text.isdigit()):
            raise ValueError("not an unsigned base-unit integer")
        wei = int(text)
        decimals = int(decimals)
        if decimals < 0:
            raise ValueError("negative decimals")
    except (TypeError, ValueError) as exc:
        logger.warning("Error converting wei balance %r: %s", value, exc)
        return value if isinstance(value, str) else str(value)

    whole, remainder = divmod(wei, 10 ** decimals)
    if remainder == 0:
        return str(whole)
    fraction = str(remainder).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{fraction}" if fraction else str(whole)


def hex_to_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.lower() in ("", "0x"):
        return 0
    return int(text, 16)
