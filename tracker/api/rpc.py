"""
The RPC endpoint: decode a request envelope, dispatch it, encode the response.
"""
import logging
from typing import Any, List

from fastapi import APIRouter, Depends

from tracker.core.dependencies import get_credential_service, get_record_service
from tracker.core.errors import TrackerError
from tracker.schemas.protocol import (
    Authenticate,
    AuthenticationResponse,
    ClientToServerMsg,
    CreateUser,
    Err,
    GetTestsAndCompletions,
    Ok,
    ServerToClientMsg,
    TestAndCompletions,
    TestsAndCompletionsForUser,
    User,
)
from tracker.services.credential_service import CredentialService
from tracker.services.record_service import RecordService

logger = logging.getLogger(__name__)

router = APIRouter()


def _authenticate(msg: Authenticate, credentials: CredentialService) -> AuthenticationResponse:
    logger.info(f"Trying to authenticate {msg.username!r}")
    try:
        user = credentials.authenticate(msg.username, msg.password)
    except TrackerError as e:
        return AuthenticationResponse(result=Err(err=e.error))
    return AuthenticationResponse(result=Ok[User](ok=user))


def _create_user(msg: CreateUser, credentials: CredentialService) -> AuthenticationResponse:
    logger.info(f"Trying to create user {msg.username!r}")
    try:
        user = credentials.create_user(msg.username, msg.password)
    except TrackerError as e:
        return AuthenticationResponse(result=Err(err=e.error))
    return AuthenticationResponse(result=Ok[User](ok=user))


def _tests_and_completions(
    msg: GetTestsAndCompletions, records: RecordService
) -> TestsAndCompletionsForUser:
    logger.info(f"Fetching tests and completions for {msg.user_id}")
    try:
        tests_and_completions = records.tests_and_completions_for_user(msg.user_id)
    except TrackerError as e:
        return TestsAndCompletionsForUser(result=Err(err=e.error))
    return TestsAndCompletionsForUser(result=Ok[List[TestAndCompletions]](ok=tests_and_completions))


@router.post("/", response_model=ServerToClientMsg, tags=["RPC"])
def handle_message(
    msg: ClientToServerMsg,
    credentials: CredentialService = Depends(get_credential_service),
    records: RecordService = Depends(get_record_service),
) -> Any:
    """
    Handle a single client message.

    Business failures are returned inside the response body with a 200
    status; only a malformed body is rejected at the transport level.

    Args:
        msg: Request envelope, discriminated by its ``type`` field
        credentials: Credential store
        records: Record store

    Returns:
        The matching response envelope
    """
    if isinstance(msg, Authenticate):
        return _authenticate(msg, credentials)
    if isinstance(msg, CreateUser):
        return _create_user(msg, credentials)
    if isinstance(msg, GetTestsAndCompletions):
        return _tests_and_completions(msg, records)
    raise TypeError(f"Unhandled message type {type(msg).__name__}")
