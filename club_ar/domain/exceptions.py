"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    code = "domain_error"


class InvalidInputError(DomainException):
    """Malformed dates, negative amounts or otherwise invalid engine input"""

    code = "invalid_input"


class UnknownInvoiceError(InvalidInputError):
    """Allocation references an invoice that is not in the open set"""

    code = "unknown_invoice"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice {invoice_id} is not an open invoice for this account")


class AllocationError(DomainException):
    """Proposed allocation was rejected"""

    code = "allocation_error"


class NegativeAllocationError(AllocationError):
    """Allocation amount below zero"""

    code = "negative_allocation"

    def __init__(self, invoice_id: str, amount_cents: int):
        self.invoice_id = invoice_id
        self.amount_cents = amount_cents
        super().__init__(f"Allocation for invoice {invoice_id} cannot be negative ({amount_cents})")


class OverAllocationError(AllocationError):
    """Allocation amount exceeds the invoice's outstanding balance"""

    code = "over_allocation"

    def __init__(self, invoice_id: str, amount_cents: int, balance_cents: int):
        self.invoice_id = invoice_id
        self.amount_cents = amount_cents
        self.balance_cents = balance_cents
        super().__init__(
            f"Allocation {amount_cents} for invoice {invoice_id} cannot exceed balance {balance_cents}"
        )


class FundsExceededError(AllocationError):
    """Sum of proposed allocations exceeds the settlement funds"""

    code = "funds_exceeded"

    def __init__(self, allocated_cents: int, funds_cents: int):
        self.allocated_cents = allocated_cents
        self.funds_cents = funds_cents
        super().__init__(
            f"Total allocated {allocated_cents} cannot exceed settlement funds {funds_cents}"
        )


class InsufficientFundsError(AllocationError):
    """Full settlement requested but funds do not cover every open balance"""

    code = "insufficient_funds"

    def __init__(self, required_cents: int, funds_cents: int):
        self.required_cents = required_cents
        self.funds_cents = funds_cents
        self.shortfall_cents = required_cents - funds_cents
        super().__init__(
            f"Full settlement requires {required_cents} but only {funds_cents} available "
            f"(short by {self.shortfall_cents})"
        )
