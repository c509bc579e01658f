"""
Application Errors
"""


class DataAccessError(Exception):
    """The datastore could not be reached or a query failed."""

    def __init__(self, message: str, operation: str = "query"):
        super().__init__(message)
        self.message = message
        self.operation = operation
