"""
Message envelopes exchanged between the client and the server.

Requests and responses are JSON objects tagged by a ``type`` field. The result
of a business operation travels inside the response as ``{"ok": value}`` or
``{"err": error}``.
"""
import datetime
from typing import Annotated, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from tracker.schemas.error import Error

T = TypeVar("T")


class User(BaseModel):
    """The public projection of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str


class TestData(BaseModel):
    """The public fields of a test."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    subject: str
    topic: Optional[str] = None
    date_or_id: str
    qualification_level: Optional[str] = None
    exam_board: Optional[str] = None
    paper_link: Optional[str] = None
    mark_scheme_link: Optional[str] = None
    comments: Optional[str] = None


class CompletionData(BaseModel):
    """The public fields of a completion."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    achieved_mark: int
    total_marks: int
    date: Optional[datetime.date] = None
    comments: Optional[str] = None


class TestAndCompletions(BaseModel):
    """A test paired with every completion recorded against it."""

    test: TestData
    completions: List[CompletionData] = []


class Ok(BaseModel, Generic[T]):
    """The successful arm of a result."""

    ok: T


class Err(BaseModel):
    """The failed arm of a result."""

    err: Error


# Requests


class Authenticate(BaseModel):
    """Authenticate an existing user with their username and password."""

    type: Literal["Authenticate"] = "Authenticate"
    username: str
    password: str


class CreateUser(BaseModel):
    """Create a new user with the given username and password."""

    type: Literal["CreateUser"] = "CreateUser"
    username: str
    password: str


class GetTestsAndCompletions(BaseModel):
    """Get every test and its completions for the given user."""

    type: Literal["GetTestsAndCompletions"] = "GetTestsAndCompletions"
    user_id: str


ClientToServerMsg = Annotated[
    Union[Authenticate, CreateUser, GetTestsAndCompletions],
    Field(discriminator="type"),
]


# Responses


class AuthenticationResponse(BaseModel):
    """A response to authentication or account creation."""

    type: Literal["AuthenticationResponse"] = "AuthenticationResponse"
    result: Union[Ok[User], Err]


class TestsAndCompletionsForUser(BaseModel):
    """All the tests the requested user has done, with their completions."""

    type: Literal["TestsAndCompletionsForUser"] = "TestsAndCompletionsForUser"
    result: Union[Ok[List[TestAndCompletions]], Err]


ServerToClientMsg = Annotated[
    Union[AuthenticationResponse, TestsAndCompletionsForUser],
    Field(discriminator="type"),
]

client_msg_adapter: TypeAdapter = TypeAdapter(ClientToServerMsg)
server_msg_adapter: TypeAdapter = TypeAdapter(ServerToClientMsg)


def encode_message(msg: BaseModel) -> str:
    """Serialize a request or response envelope to JSON."""
    return msg.model_dump_json()


def decode_request(body: Union[str, bytes]):
    """Parse a request envelope. Raises ``pydantic.ValidationError`` if malformed."""
    return client_msg_adapter.validate_json(body)


def decode_response(body: Union[str, bytes]):
    """Parse a response envelope. Raises ``pydantic.ValidationError`` if malformed."""
    return server_msg_adapter.validate_json(body)
