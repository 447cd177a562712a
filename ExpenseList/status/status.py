"""Status definitions and exceptions for ExpenseList.

This module provides:
    - Status: enumeration of possible application states
    - STATUS_MESSAGE: messages for each status
    - get_message: retrieve the message for a status
    - BaseStatusException: base exception carrying a Status
    - Specific exceptions (e.g., PermissionDeniedException) raised by the settings and store layers
"""
import enum
import logging
from typing import Dict


class Status(enum.StrEnum):
    """Enumeration of application status codes."""
    UnknownStatus = enum.auto()
    Okay = enum.auto()

    # Config status
    SettingsNotFound = enum.auto()
    SettingsInvalid = enum.auto()

    # Identity and credentials
    NotSignedIn = enum.auto()
    CredentialsInvalid = enum.auto()

    # Document store status
    ServiceUnavailable = enum.auto()
    PermissionDenied = enum.auto()
    DocumentNotFound = enum.auto()

    # Edit input
    DateInvalid = enum.auto()


STATUS_MESSAGE: Dict[Status, str] = {
    Status.UnknownStatus: 'Unknown status.',
    Status.Okay: 'Everything is okay.',

    Status.SettingsNotFound: 'Could not find the settings file.',
    Status.SettingsInvalid: 'The settings file seems to be incomplete, or contains invalid values.',

    Status.NotSignedIn: 'No user is signed in.',
    Status.CredentialsInvalid: 'Could not load the Firestore credentials. Is the credentials path in the settings valid?',

    Status.ServiceUnavailable: 'Firestore is unavailable. Please check your connection.',
    Status.PermissionDenied: 'Firestore denied access to the expenses collection.',
    Status.DocumentNotFound: 'The expense document does not exist.',

    Status.DateInvalid: 'The date must be in YYYY-MM-DD format.',
}


def get_message(status: Status) -> str:
    """
    Get the message for a given status.

    Args:
        status (Status): The status enum.

    Returns:
        str: The message associated with the status.
    """
    return STATUS_MESSAGE.get(status, 'Unknown status')


class BaseStatusException(Exception):
    """Base exception for status-based errors in ExpenseList.

    Attributes:
        status (Status): Status code associated with this error.
        status_message (str): Message for the status.

    Args:
        message (str): Optional additional context for the error.
    """
    status = Status.UnknownStatus

    def __init__(self, message: str = None):
        self.status_message = get_message(self.status)
        exception_message = f'{self.status_message} {message}' if message else self.status_message
        super().__init__(exception_message)

        logging.debug(f'{self.__class__.__name__}: {exception_message}')


class UnknownException(BaseStatusException):
    """Exception for an unknown error during status processing."""
    pass


class SettingsNotFoundException(BaseStatusException):
    """Exception raised when the settings file cannot be found."""
    status = Status.SettingsNotFound


class SettingsInvalidException(BaseStatusException):
    """Exception raised when the settings file is invalid or malformed."""
    status = Status.SettingsInvalid


class NotSignedInException(BaseStatusException):
    """Exception raised when a write is requested without a signed-in user."""
    status = Status.NotSignedIn


class CredentialsInvalidException(BaseStatusException):
    """Exception raised when the service account credentials cannot be loaded."""
    status = Status.CredentialsInvalid


class ServiceUnavailableException(BaseStatusException):
    """Exception raised when Firestore cannot be reached."""
    status = Status.ServiceUnavailable


class PermissionDeniedException(BaseStatusException):
    """Exception raised when Firestore security rules reject a request."""
    status = Status.PermissionDenied


class DocumentNotFoundException(BaseStatusException):
    """Exception raised when updating a document that no longer exists."""
    status = Status.DocumentNotFound


class DateInvalidException(BaseStatusException):
    """Exception raised when an edited date cannot be parsed."""
    status = Status.DateInvalid
