"""
Pydantic schemas for the errors carried inside protocol responses.

Errors are tagged unions discriminated by the ``kind`` field so that both
halves of the protocol can pattern-match on them.
"""
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class NotFound(BaseModel):
    """A query that was meant to return a row returned nothing."""

    kind: Literal["NotFound"] = "NotFound"


class UniqueViolation(BaseModel):
    """A uniqueness constraint was violated by an insert."""

    kind: Literal["UniqueViolation"] = "UniqueViolation"
    message: str
    details: Optional[str] = None
    hint: Optional[str] = None


class OtherDatabaseError(BaseModel):
    """Any other database failure."""

    kind: Literal["Other"] = "Other"
    message: str


DbError = Annotated[
    Union[NotFound, UniqueViolation, OtherDatabaseError],
    Field(discriminator="kind"),
]


class DatabaseError(BaseModel):
    """An error occurred in accessing the database."""

    kind: Literal["DatabaseError"] = "DatabaseError"
    error: DbError

    def __str__(self) -> str:
        return f"error accessing the database: {self.error!r}"


class InvalidPassword(BaseModel):
    """The supplied password did not match the stored hash."""

    kind: Literal["InvalidPassword"] = "InvalidPassword"

    def __str__(self) -> str:
        return "invalid password"


class HashingError(BaseModel):
    """The password hashing library failed."""

    kind: Literal["HashingError"] = "HashingError"
    message: str

    def __str__(self) -> str:
        return f"error hashing password: {self.message}"


Error = Annotated[
    Union[DatabaseError, InvalidPassword, HashingError],
    Field(discriminator="kind"),
]
