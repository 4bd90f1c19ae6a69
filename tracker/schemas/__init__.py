"""Schemas module - Import all schemas."""
from tracker.schemas.error import (
    DatabaseError,
    Error,
    HashingError,
    InvalidPassword,
    NotFound,
    OtherDatabaseError,
    UniqueViolation,
)
from tracker.schemas.protocol import (
    Authenticate,
    AuthenticationResponse,
    ClientToServerMsg,
    CompletionData,
    CreateUser,
    Err,
    GetTestsAndCompletions,
    Ok,
    ServerToClientMsg,
    TestAndCompletions,
    TestData,
    TestsAndCompletionsForUser,
    User,
)
from tracker.schemas.test import CompletionCreate, TestCreate

__all__ = [
    "DatabaseError",
    "Error",
    "HashingError",
    "InvalidPassword",
    "NotFound",
    "OtherDatabaseError",
    "UniqueViolation",
    "Authenticate",
    "AuthenticationResponse",
    "ClientToServerMsg",
    "CompletionData",
    "CreateUser",
    "Err",
    "GetTestsAndCompletions",
    "Ok",
    "ServerToClientMsg",
    "TestAndCompletions",
    "TestData",
    "TestsAndCompletionsForUser",
    "User",
    "CompletionCreate",
    "TestCreate",
]
