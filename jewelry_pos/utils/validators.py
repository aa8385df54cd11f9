# utils/validators.py
from decimal import Decimal, InvalidOperation

# ---- Numeric parsing & validators ----

def try_parse_decimal(x):
    """
    Best-effort parse to Decimal.

    Returns:
        (ok: bool, value: Decimal|None)

    Blank input parses as zero so that empty payment fields read as "nothing
    entered". ok == False means parsing failed and value is None.
    """
    if x is None:
        return True, Decimal("0")
    if isinstance(x, Decimal):
        return (True, x) if x.is_finite() else (False, None)
    text = str(x).strip().replace(",", "")
    if text == "":
        return True, Decimal("0")
    try:
        value = Decimal(text)
    except (InvalidOperation, ValueError):
        return False, None
    if not value.is_finite():
        return False, None
    return True, value

def parse_decimal(x) -> Decimal:
    """
    Strict parse to Decimal; raises ValueError with a clear message on failure.
    This is the gate that keeps non-numeric text out of the pricing engine.
    """
    ok, val = try_parse_decimal(x)
    if not ok:
        raise ValueError(f"Could not parse '{x}' as a number.")
    return val  # type: ignore[return-value]

