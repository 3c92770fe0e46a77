import secrets
import string
import time


def generate_custom_id(prefix: str, length: int = 8) -> str:
    random_part = ''.join(secrets.choice(string.ascii_uppercase)
                          for _ in range(length))
    return f"{prefix}-{random_part}"


def generate_invoice_number() -> str:
    """Default invoice number: INV-<epoch millis>."""
    return f"INV-{int(time.time() * 1000)}"
