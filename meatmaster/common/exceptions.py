"""
Error taxonomy.

Routine not-found results are returned as None/False by the services, not
raised. ValidationError is raised before any write. Insufficient stock is a
per-item flag on the invoice result, not an exception.
"""


class ValidationError(ValueError):
    """Rejected input; nothing was written."""


class DuplicateEmailError(ValidationError):
    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already exists")
