from bowlingclub import bcrypt


def hash_password(password: str) -> str:
    """Salted bcrypt hash; cost comes from BCRYPT_LOG_ROUNDS."""
    return bcrypt.generate_password_hash(password).decode('utf-8')


def check_password(password_hash: str, password: str) -> bool:
    try:
        return bcrypt.check_password_hash(password_hash, password)
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
