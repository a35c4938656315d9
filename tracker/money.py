import re
from decimal import Decimal, InvalidOperation, localcontext

_TWO_DP = Decimal("0.01")
_ZERO = Decimal("0.00")

# leading decimal literal, the same prefix a browser's parseFloat accepts
_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_money(text) -> Decimal:
    """Lenient amount parse for inline edits. Anything unparseable becomes 0."""
    if isinstance(text, Decimal):
        return text
    match = _NUMBER_PREFIX.match(str(text))
    if match is None:
        return _ZERO
    try:
        value = Decimal(match.group(1))
    except InvalidOperation:
        return _ZERO
    return value if value.is_finite() else _ZERO


def quantize(amount: Decimal) -> Decimal:
    # quantize needs every integer digit plus two decimals within the context precision
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(_TWO_DP)


def format_money(amount: Decimal) -> str:
    """Two decimals behind a literal dollar sign, no locale grouping."""
    return f"${quantize(amount)}"
