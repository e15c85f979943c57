from pwdlib import PasswordHash

password_hash = PasswordHash.recommended()


def get_password_hash(password: str) -> str:
    """
    Hashes a password with Argon2.

    :param password: Plain password.
    :return: Password hash.
    :rtype: str
    :raises ValueError: If the password is empty.
    """
    if not password:
        raise ValueError("Password cannot be empty")
    return password_hash.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Checks a plain password against a stored hash.

    :param plain_password: Password entered by the user.
    :param hashed_password: Hash from the database.
    :return: Whether the password matches.
    :rtype: bool
    :raises ValueError: If either argument is empty.
    """
    if not plain_password or not hashed_password:
        raise ValueError("Password and hash cannot be empty")
    return password_hash.verify(plain_password, hashed_password)


class Argon2PasswordHashingService:
    """Password hashing port backed by pwdlib."""

    def hash_password(self, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        return verify_password(password, password_hash)
