"""Transfer boundary exceptions."""


class TransferError(Exception):
    """Base exception for import/export, backup and sharing."""
    pass


class TransferFormatError(TransferError):
    """A CSV file could not be read as the expected collection."""
    pass


class BackupFormatError(TransferError):
    """A backup file is not a usable application state."""
    pass


class ShareTokenError(TransferError):
    """A shared-record token could not be decoded."""
    pass
