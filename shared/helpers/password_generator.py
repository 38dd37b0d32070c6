import secrets
import string

SPECIAL_CHARS = "!@#$%^&*"
PASSWORD_ALPHABET = string.ascii_letters + string.digits + SPECIAL_CHARS


def generate_temporary_password(length: int = 12) -> str:
    """Random password for admin-created accounts and resets.

    Contains at least one upper, lower, digit and special character.
    """
    length = max(length, 8)
    while True:
        password = "".join(secrets.choice(PASSWORD_ALPHABET)
                           for _ in range(length))
        if (any(c.isupper() for c in password)
                and any(c.islower() for c in password)
                and any(c.isdigit() for c in password)
                and any(c in SPECIAL_CHARS for c in password)):
            return password
