"""Password hashing via werkzeug.security"""

from werkzeug.security import check_password_hash, generate_password_hash

from inkwell.config.settings import settings


def hash_password(password: str) -> str:
    return generate_password_hash(password, method=settings.PASSWORD_HASH_METHOD)


def verify_password(password_hash: str | None, password: str | None) -> bool:
    if not password_hash or password is None:
        return False
    return check_password_hash(password_hash, password)
