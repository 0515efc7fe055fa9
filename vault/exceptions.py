"""Custom exception classes for the vault core."""


class VaultException(Exception):
    """
    Base exception class for all vault-related errors.
    """
    pass


class AdmissionError(VaultException):
    """
    Raised when an upload could not be admitted into the collection.
    No record is created when this is raised.
    """
    pass


class EncryptionError(AdmissionError):
    """
    Raised when the encryption step of an upload fails.
    """
    pass


class IntegrityError(AdmissionError):
    """
    Raised when a checksum could not be computed or does not match.
    """
    pass


class DecryptionError(VaultException):
    """
    Raised when a protected payload cannot be decrypted with the given key.
    """
    pass


class InvalidRecipientError(VaultException):
    """
    Raised when a share target is not a plausible email address.
    """
    pass


class NotFoundError(VaultException):
    """
    Raised when a requested record or grant does not exist.
    """
    pass


class StorageError(VaultException):
    """
    Raised when the external storage collaborator fails.
    """
    pass


class UnauthorizedAccessError(VaultException):
    """
    Raised when the acting user lacks the capability an operation requires.
    """
    pass


class UserAlreadyExistsError(VaultException):
    """
    Raised when attempting to register an email that already exists.
    """
    pass


class InvalidCredentialsError(VaultException):
    """
    Raised when login credentials are invalid.
    """
    pass


class InvalidAPIKeyError(VaultException):
    """
    Raised when an API Key is invalid or unknown.
    """
    pass
