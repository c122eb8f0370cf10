import re
from typing import Any

from src.libs.result import Result, Return
from .errors import invalid_input

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
# Matches the users.email column width
MAX_EMAIL_LENGTH = 255
MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def validate_email(email: Any) -> Result[None]:
    if not email or not isinstance(email, str):
        return Return.err(invalid_input("Email required"))
    if len(email.strip()) > MAX_EMAIL_LENGTH:
        return Return.err(invalid_input(f"Email must be at most {MAX_EMAIL_LENGTH} characters long"))
    if not EMAIL_PATTERN.match(email.strip()):
        return Return.err(invalid_input("Invalid email"))
    return Return.ok(None)


def validate_password(password: Any) -> Result[None]:
    if not password or not isinstance(password, str):
        return Return.err(invalid_input("Password required"))
    if len(password) < MIN_PASSWORD_LENGTH:
        return Return.err(
            invalid_input(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return Return.err(
            invalid_input(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
        )
    return Return.ok(None)


def validate_credentials(email: Any, password: Any) -> Result[None]:
    if not email or not password:
        return Return.err(invalid_input("Email and password required"))
    result = validate_email(email)
    if result.is_err():
        return result
    return validate_password(password)
