"""
Status codes, thread-scoped last error, and fault containment.

The last error message is stored per thread: it is not a channel to
report results from one thread to another.

"""

import enum
import functools
import json
import threading

from .exceptions import (AtomdescError, EncodingError, InternalFault,
                         InvalidParameterError, ParameterSyntaxError)
from .log import logger

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"


class Status(enum.IntEnum):
    SUCCESS = 0
    INVALID_PARAMETER = 1
    PARAMETER_SYNTAX_ERROR = 2
    ENCODING_ERROR = 3
    UNKNOWN_ERROR = 254
    INTERNAL_FAULT = 255


_STATUS_OF_ERROR = [
    (InvalidParameterError, Status.INVALID_PARAMETER),
    (ParameterSyntaxError, Status.PARAMETER_SYNTAX_ERROR),
    (EncodingError, Status.ENCODING_ERROR),
    (InternalFault, Status.INTERNAL_FAULT),
    (AtomdescError, Status.UNKNOWN_ERROR),
]

_local = threading.local()


def last_error():
    """
    Message of the last error that happened on the calling thread.

    """
    return getattr(_local, "message", "")


def set_last_error(message):
    _local.message = message


def status_of(error):
    """
    Map an exception to the corresponding status code.

    Args:
      error (Exception): the exception to classify

    Returns:
      A `Status` value; exceptions that are not part of the atomdesc
      hierarchy are classified as internal faults.

    """
    for cls, status in _STATUS_OF_ERROR:
        if isinstance(error, cls):
            return status
    if isinstance(error, UnicodeError):
        return Status.ENCODING_ERROR
    if isinstance(error, json.JSONDecodeError):
        return Status.PARAMETER_SYNTAX_ERROR
    return Status.INTERNAL_FAULT


def contain(what, function, *args, **kwargs):
    """
    Call `function` and convert any unexpected exception to InternalFault.

    Errors from the atomdesc hierarchy pass through unchanged, since they
    were raised on purpose.  `what` describes the call for the error
    message.

    """
    try:
        return function(*args, **kwargs)
    except AtomdescError:
        raise
    except Exception as e:
        raise InternalFault(
            "{} failed: {}: {}".format(what, type(e).__name__, e)) from e


def boundary(function):
    """
    Decorator for the functions of the boundary surface.

    The decorated function returns `Status.SUCCESS` (or a tuple starting
    with it) on success.  On failure the last error of the calling thread
    is set and the failure status is returned, padded with `fallback`
    values when the function returns a tuple.

    """
    return _boundary(function, None)


def boundary_with(*fallback):
    def decorator(function):
        return _boundary(function, fallback)
    return decorator


def _boundary(function, fallback):
    @functools.wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except Exception as e:
            status = status_of(e)
            message = getattr(e, "msg", None) or str(e)
            if status == Status.INTERNAL_FAULT and not isinstance(
                    e, InternalFault):
                message = "internal fault: {}: {}".format(
                    type(e).__name__, e)
            set_last_error(message)
            logger.debug("%s returned %s: %s",
                         function.__name__, status.name, message)
            if fallback is None:
                return status
            return (status,) + tuple(fallback)
    return wrapper
