"""Retry policy for opening console sessions.

Only session setup is retried. A command list that reached vtysh is never
sent twice from here.
"""
import logging
import socket
from typing import Any, Callable, TypeVar

import paramiko
from tenacity import (
    Retrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
    before_sleep_log,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Transport failures worth another attempt
RETRYABLE_EXCEPTIONS = (
    ConnectionRefusedError,
    ConnectionResetError,
    TimeoutError,
    socket.timeout,
    EOFError,
    paramiko.ssh_exception.NoValidConnectionsError,
    paramiko.SSHException,
)

# Subclasses of the above that another attempt cannot fix
NON_RETRYABLE_EXCEPTIONS = (
    paramiko.AuthenticationException,
    paramiko.BadHostKeyException,
)


def is_retryable(exc: BaseException, exceptions: tuple = RETRYABLE_EXCEPTIONS) -> bool:
    """Check whether a connection failure should be retried."""
    return isinstance(exc, exceptions) and not isinstance(exc, NON_RETRYABLE_EXCEPTIONS)


def _policy(max_attempts: int, min_wait: float, max_wait: float, exceptions: tuple) -> dict[str, Any]:
    return dict(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception(lambda exc: is_retryable(exc, exceptions)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def connect_with_retry(connect: Callable[[], T], attempts: int, delay: float) -> T:
    """Call ``connect`` until it succeeds or ``attempts`` are used up.

    Waits start at ``delay`` seconds and back off up to five times that.
    The last failure is re-raised unchanged.
    """
    for attempt in Retrying(**_policy(attempts, delay, delay * 5, RETRYABLE_EXCEPTIONS)):
        with attempt:
            return connect()
