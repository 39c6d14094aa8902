# backend/utils/tracking.py
import secrets
import string

from config import settings

_ALPHABET = string.digits + string.ascii_uppercase

# Generate a public tracking code: prefix + random base-36 suffix (e.g. HH-4K9Z2QA)
def generate_tracking_id(prefix: str = None, length: int = None) -> str:
    prefix = settings.TRACKING_PREFIX if prefix is None else prefix
    length = settings.TRACKING_CODE_LENGTH if length is None else length
    return prefix + "".join(secrets.choice(_ALPHABET) for _ in range(length))
