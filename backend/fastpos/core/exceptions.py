"""
Error taxonomy for FastPOS

None of these terminate the process: the API layer maps them to HTTP
responses and the services keep operating on local state.
"""


class FastPOSError(Exception):
    """Base class for all FastPOS errors"""


class DomainValidationError(FastPOSError, ValueError):
    """Input rejected by a ledger (empty description, non-positive amount...)"""


class InvalidExchangeRateError(DomainValidationError):
    """Exchange rate is zero, negative or not a number"""


class ExchangeRateError(FastPOSError):
    """Refreshing the rate from the quote source failed; previous rate kept"""


class BackupValidationError(FastPOSError):
    """Backup document does not have the required shape; nothing was imported"""


class RemoteStoreError(FastPOSError):
    """A call to the remote store failed"""
