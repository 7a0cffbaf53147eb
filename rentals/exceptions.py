class LedgerError(Exception):
    """Base class for rejected rental operations."""

    status_code = 400

    def __init__(self, detail):
        super().__init__(detail)
        self.detail = detail


class MissingField(LedgerError):
    pass


class InvalidAmount(LedgerError):
    pass


class InvalidMethod(LedgerError):
    pass


class ValidationFailed(LedgerError):
    pass


class NotFound(LedgerError):
    status_code = 404


class InconsistentState(LedgerError):
    """The stored rows contradict the operation (e.g. vacating an empty unit)."""

    status_code = 409


class InvalidTransition(LedgerError):
    status_code = 409


class ImmutablePayment(LedgerError):
    status_code = 409
