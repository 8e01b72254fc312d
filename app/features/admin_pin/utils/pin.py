import re
import secrets

PIN_LENGTH = 4
PIN_MIN = 1000
PIN_MAX = 9999

_PIN_PATTERN = re.compile(rf"[0-9]{{{PIN_LENGTH}}}")


def generate_pin() -> str:
    """Generate a 4-digit PIN uniformly from [1000, 9999]"""
    return str(PIN_MIN + secrets.randbelow(PIN_MAX - PIN_MIN + 1))


def is_valid_pin(value) -> bool:
    # ASCII digits only; str.isdigit() would also accept other scripts
    return isinstance(value, str) and _PIN_PATTERN.fullmatch(value) is not None


def normalize_email(email: str) -> str:
    return email.strip().lower()
