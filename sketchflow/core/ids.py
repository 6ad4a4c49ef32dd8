"""
Identifier generation for diagram elements.

IDs follow the 21-character length used by Excalidraw itself; seeds and
version nonces are positive 31-bit integers.
"""

import random
import time
import uuid

ID_LENGTH = 21
MAX_NONCE = 2**31 - 1


def generate_id() -> str:
    """Generate a unique element ID."""
    return uuid.uuid4().hex[:ID_LENGTH]


def generate_seed() -> int:
    """Generate a random seed for element rendering."""
    return random.randrange(MAX_NONCE)


def generate_version_nonce() -> int:
    """Generate a version nonce."""
    return random.randrange(MAX_NONCE)


def timestamp_ms() -> int:
    """Current time in milliseconds, the unit of `updated`."""
    return int(time.time() * 1000)
