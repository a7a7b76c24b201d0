"""
Short, URL-safe paste identifiers.
"""
import secrets
import string

# Same 64-symbol alphabet as nanoid
ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "_-"

ID_LENGTH = 10


def generate_paste_id(length: int = ID_LENGTH) -> str:
    """
    Generate a random paste identifier.

    Uses the `secrets` module, so identifiers are not guessable. With 64
    symbols and 10 characters there are 2**60 possible ids; collisions are
    left to the store to report.

    Returns:
        str: An identifier like "V1StGXR8_Z"
    """
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
