"""Password verifiers."""

from werkzeug.security import check_password_hash, generate_password_hash

from ..exceptions import PasswordAuthenticationFailed


def hash_password(password: str) -> str:
    """Generate a secure, salted hash of a password."""
    return generate_password_hash(password)


def check_password(password: str, encrypted: str) -> None:
    """Check a password against an encrypted hash."""
    if not encrypted or not check_password_hash(encrypted, password):
        raise PasswordAuthenticationFailed('Incorrect password')
