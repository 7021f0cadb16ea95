# mentorship/errors.py
"""
Error taxonomy shared by the lifecycle service, the blob store and the
maintenance scheduler. main.py maps each class onto an HTTP status.
"""


class MentorshipError(Exception):
    """Base class for domain errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(MentorshipError):
    """A referenced user, admin, task or blob does not exist"""

    status_code = 404


class BlobNotFound(NotFound):
    """The blob store has no object under the given id"""


class ValidationError(MentorshipError):
    """Required data is missing or malformed"""

    status_code = 400


class ConflictError(MentorshipError):
    """The operation collides with the current state of the entity"""

    status_code = 409


class StorageError(MentorshipError):
    """Blob or record I/O failed, or the store is not ready"""

    status_code = 503
