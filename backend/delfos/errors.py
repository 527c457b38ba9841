"""Typed errors raised by the quiz services.

Each error kind carries a stable ``code`` and the HTTP status the transport
layer maps it to, so clients can tell "try again" from "your input was wrong".
"""


class ProfilerError(Exception):
    code = 'error'
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


class NotFound(ProfilerError):
    code = 'not_found'
    status_code = 404


class AlreadyExists(ProfilerError):
    code = 'already_exists'
    status_code = 409


class InvalidInput(ProfilerError):
    code = 'invalid_input'
    status_code = 400


class InvalidCount(InvalidInput):
    code = 'invalid_count'


class StorageError(ProfilerError):
    code = 'storage_error'
    status_code = 503


class ConcurrencyFault(ProfilerError):
    code = 'concurrency_fault'
    status_code = 500


class BankLoadError(ProfilerError):
    """Static question data is malformed. Fatal at startup."""
    code = 'bank_load_error'
