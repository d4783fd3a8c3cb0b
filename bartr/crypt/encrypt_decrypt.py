import re

import bcrypt


class EncryptionDec:
    """
    Utility class for password hashing and validation.

    Methods
    -------
    hash_password(text: str) -> str
        Hashes a plaintext password using bcrypt with a generated salt.
    check_passwords(plain_text: str, passwd: str) -> bool
        Verifies a plaintext password against a hashed password.
    is_valid_password(password: str) -> bool
        Validates that a password meets the registration rules:
        - At least 8 characters
        - At least one letter
        - At least one digit
    """

    def hash_password(self, text: str) -> str:
        """
        Hash a plaintext password using bcrypt.

        Parameters
        ----------
        text : str
            The plaintext password.

        Returns
        -------
        str
            The bcrypt-hashed password (UTF-8 decoded).
        """
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(text.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def check_passwords(self, plain_text: str, passwd: str) -> bool:
        """
        Verify if a plaintext password matches a hashed password.

        Returns
        -------
        bool
            True if the password matches, False otherwise.
        """
        return bcrypt.checkpw(plain_text.encode("utf-8"), passwd.encode("utf-8"))

    def is_valid_password(self, password: str) -> bool:
        """
        Validate that a password is at least 8 characters long and mixes
        letters and digits.
        """
        if len(password) < 8:
            return False

        has_letter = re.search(r"[A-Za-z]", password)
        has_digit = re.search(r"\d", password)

        return all([has_letter, has_digit])
