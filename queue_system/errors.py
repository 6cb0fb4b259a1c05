"""Ledger error types.

Each carries a short ``code`` that views put in the JSON error body.
"""


class LedgerError(Exception):
    code = 'ledger_error'
    status = 400


class BookingFailed(LedgerError):
    code = 'booking_failed'

    def __init__(self, message='Booking failed.'):
        super().__init__(message)


class InvalidTransition(LedgerError):
    code = 'invalid_transition'
    status = 409

    def __init__(self, current, target):
        super().__init__(f'Cannot move a {current} token to {target}')
        self.current = current
        self.target = target


class NotPermitted(LedgerError):
    code = 'forbidden'
    status = 403
