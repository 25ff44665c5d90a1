class LedgerQueryError(Exception):
    """Raised when ledger or stats retrieval fails.

    Callers surface this as a server error instead of an empty result so an
    outage is never mistaken for "no data".
    """

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ResourceNotFoundError(Exception):
    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id
