class LedgerError(Exception):
    status_code = 400
    code = "LEDGER_ERROR"

    def __init__(self, message: str, field: str | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field
        if code:
            self.code = code


class ValidationError(LedgerError):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(LedgerError):
    status_code = 404
    code = "NOT_FOUND"


class SettlementTransactionNotFound(NotFoundError):
    code = "SETTLEMENT_TRANSACTION_NOT_FOUND"

    def __init__(self, transaction_id: str):
        super().__init__(
            f"Settlement transaction not found: {transaction_id}",
            field="transaction_ids",
        )
        self.transaction_id = transaction_id


class AuthorizationError(LedgerError):
    status_code = 403
    code = "AUTHORIZATION_DENIED"


class PersistenceError(LedgerError):
    status_code = 500
    code = "PERSISTENCE_FAILURE"

    def __init__(self, message: str = "Storage failure, no changes were applied"):
        super().__init__(message)
