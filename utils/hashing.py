from passlib.context import CryptContext

bcrypt_context = CryptContext(schemes=['bcrypt'], deprecated='auto')

# bcrypt only looks at the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72


def _truncate(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    return bcrypt_context.hash(_truncate(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a plaintext password against a stored digest.

    Malformed or missing digests count as a mismatch rather than an error.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt_context.verify(_truncate(plain_password), hashed_password)
    except (ValueError, TypeError):
        return False
