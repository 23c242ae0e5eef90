"""
Exceptions for TinyPM
This is placed such that there is a general error catcher
"""


class TinyPMError(Exception):
    # general container for errors
    pass


class AuthenticationFailure(TinyPMError):
    # raised when an envelope does not decrypt: wrong password, corrupt or tampered data.
    # callers cannot tell those causes apart
    def __init__(self, message: str = "Could not decrypt record"):
        super().__init__(message)


class MalformedEnvelopeError(AuthenticationFailure):
    # raised by the low-level unpack when bytes are shorter than the fixed header
    pass


class InvalidPasswordError(AuthenticationFailure):
    # raised when a candidate master password does not open the canary
    def __init__(self, message: str = "Invalid password"):
        super().__init__(message)


class MissingCanaryError(TinyPMError):
    # raised when unlocking before a master password exists
    def __init__(self, message: str = "You must create a master password first"):
        super().__init__(message)


class RandomSourceUnavailableError(TinyPMError):
    # raised when the OS random source fails; fatal, never retried
    pass


class InvalidStateError(TinyPMError):
    # raised when a gate operation is called from the wrong state
    pass


class SessionLockedError(TinyPMError):
    # raised when record operations run without an unlocked session
    pass


class StorageError(TinyPMError):
    # raised if the record store fails in some way
    pass


class RecordNotFoundError(StorageError):
    # raised when a record id DNE
    pass


class ImportFormatError(TinyPMError):
    # raised when a CSV row cannot be mapped to a record
    pass
