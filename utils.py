import math

from werkzeug.security import generate_password_hash, check_password_hash


def to_amount(value) -> float:
    """Coerce a stored/submitted amount to a finite float (2 dp). Bad input counts as 0.00."""
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return round(amount, 2)


def is_all(value) -> bool:
    """Filter sentinel: missing, blank and "All" all mean no constraint."""
    return value is None or str(value).strip() == "" or str(value).strip().lower() == "all"


def number_to_words(num):
    """Convert a whole number to words (international format)"""
    ones = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
            "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
            "Seventeen", "Eighteen", "Nineteen"]
    tens = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

    if num == 0:
        return "Zero"

    if num < 0:
        return "Minus " + number_to_words(-num)

    result = ""

    if num >= 1000000000:  # Billion
        result += number_to_words(num // 1000000000) + " Billion "
        num %= 1000000000

    if num >= 1000000:  # Million
        result += number_to_words(num // 1000000) + " Million "
        num %= 1000000

    if num >= 1000:  # Thousand
        result += number_to_words(num // 1000) + " Thousand "
        num %= 1000

    if num >= 100:  # Hundred
        result += ones[num // 100] + " Hundred "
        num %= 100

    if num >= 20:
        result += tens[num // 10] + " "
        num %= 10

    if num > 0:
        result += ones[num] + " "

    return result.strip()


def amount_in_words(amount) -> str:
    """350.5 -> 'Three Hundred Fifty and 50/100 Only'"""
    amount = to_amount(amount)
    whole = int(amount)
    cents = int(round((amount - whole) * 100))
    words = number_to_words(whole)
    if cents:
        words += f" and {cents:02d}/100"
    return words + " Only"


# --- Passwords (salted hashes only) ---

def hash_password(plain: str, method: str = "pbkdf2:sha256", salt_length: int = 16) -> str:
    plain = (plain or "").strip()
    return generate_password_hash(plain, method=method, salt_length=salt_length)


def verify_password(stored_hash: str, candidate: str) -> bool:
    if not stored_hash:
        return False
    try:
        return check_password_hash(stored_hash, (candidate or "").strip())
    except ValueError:
        # Unknown/garbled hash format
        return False
