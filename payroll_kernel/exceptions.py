"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Tax withholding is audited against the tax authority's own arithmetic.
A caller (the presentation or payment collaborator) must be able to tell
"the engine rejected this input" apart from "the engine computed zero"
without parsing message strings. Therefore:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        resolve_ptkp(marital_status="widowed", dependent_count=1, table=table)
    except UnknownMaritalStatusError as e:
        report(code=e.code, value=e.marital_status)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollEngineError (base)
    |
    +-- ConfigurationError
    |   +-- InvalidPTKPTableError
    |   +-- InvalidBracketTableError
    |   +-- InvalidAllowanceTableError
    |
    +-- PayrollValidationError
    |   +-- UnknownMaritalStatusError
    |   +-- InvalidDependentCountError
    |   +-- InvalidAmountError
    |   +-- InvalidPercentageError
    |   +-- InvalidRealizationMonthsError
    |   +-- InvalidMultiplierError
    |   +-- InvalidPeriodError
    |   +-- InvalidPeriodRangeError
    |
    +-- ResultInvariantError
    |   +-- MonetaryOverflowError
    |
    +-- PaymentStatusError
        +-- InvalidStatusTransitionError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | INVALID_PTKP_TABLE          | PTKP table malformed / non-monotonic
                | INVALID_BRACKET_TABLE       | Brackets gapped, unordered, bad rates
                | INVALID_ALLOWANCE_TABLE     | Missing position level / negative amount
----------------|-----------------------------|-----------------------------------------
Input           | UNKNOWN_MARITAL_STATUS      | Marital status outside {married, single}
                | INVALID_DEPENDENT_COUNT     | Negative or non-integer dependents
                | INVALID_AMOUNT              | Negative / non-integral money input
                | INVALID_PERCENTAGE          | Outside [0, 100] or > 1 decimal place
                | INVALID_REALIZATION_MONTHS  | Outside [0, 12]
                | INVALID_MULTIPLIER          | Bonus multiplier not a positive integer
                | INVALID_PERIOD              | Month outside 1..12, bad year
                | INVALID_PERIOD_RANGE        | Range start after range end
----------------|-----------------------------|-----------------------------------------
Result          | RESULT_INVARIANT_VIOLATION  | net != gross - withheld, negative parts
                | MONETARY_OVERFLOW           | Amount exceeds signed 64-bit headroom
----------------|-----------------------------|-----------------------------------------
Payment         | INVALID_STATUS_TRANSITION   | Transition not allowed by workflow

===============================================================================
RETRY SEMANTICS
===============================================================================

None. Every operation is a pure function; retrying with the same input
reproduces the same failure.
"""


class PayrollEngineError(Exception):
    """
    Base exception for all payroll engine errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_ENGINE_ERROR"


# Configuration exceptions


class ConfigurationError(PayrollEngineError):
    """
    Base exception for malformed rule tables.

    Fatal: raised at load time, before any computation runs.
    """

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, problems: list[str] | tuple[str, ...], source: str = ""):
        self.problems = tuple(problems)
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(
            f"Invalid payroll configuration{where}: " + "; ".join(self.problems)
        )


class InvalidPTKPTableError(ConfigurationError):
    """PTKP threshold table is malformed or not strictly increasing."""

    code: str = "INVALID_PTKP_TABLE"


class InvalidBracketTableError(ConfigurationError):
    """Progressive tax bracket table is malformed."""

    code: str = "INVALID_BRACKET_TABLE"


class InvalidAllowanceTableError(ConfigurationError):
    """Holiday allowance table does not cover every position level."""

    code: str = "INVALID_ALLOWANCE_TABLE"


# Input validation exceptions


class PayrollValidationError(PayrollEngineError):
    """Base exception for rejected engine inputs."""

    code: str = "INVALID_INPUT"


class UnknownMaritalStatusError(PayrollValidationError):
    """Marital status is not one the PTKP tables know about."""

    code: str = "UNKNOWN_MARITAL_STATUS"

    def __init__(self, marital_status: object):
        self.marital_status = marital_status
        super().__init__(
            f"Unknown marital status {marital_status!r}; "
            f"expected 'married' or 'single'"
        )


class InvalidDependentCountError(PayrollValidationError):
    """Dependent count is negative or not an integer."""

    code: str = "INVALID_DEPENDENT_COUNT"

    def __init__(self, dependent_count: object):
        self.dependent_count = dependent_count
        super().__init__(
            f"Dependent count must be a non-negative integer, got {dependent_count!r}"
        )


class InvalidAmountError(PayrollValidationError):
    """A monetary input is negative or not a whole rupiah amount."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field_name: str, amount: object, reason: str):
        self.field_name = field_name
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid {field_name} {amount!r}: {reason}")


class InvalidPercentageError(PayrollValidationError):
    """Wage increase percentage outside [0, 100] or too precise."""

    code: str = "INVALID_PERCENTAGE"

    def __init__(self, percentage: object, reason: str):
        self.percentage = percentage
        self.reason = reason
        super().__init__(f"Invalid wage increase percentage {percentage!r}: {reason}")


class InvalidRealizationMonthsError(PayrollValidationError):
    """Realization month count outside [0, 12]."""

    code: str = "INVALID_REALIZATION_MONTHS"

    def __init__(self, realization_months: object):
        self.realization_months = realization_months
        super().__init__(
            f"Realization months must be an integer in [0, 12], "
            f"got {realization_months!r}"
        )


class InvalidMultiplierError(PayrollValidationError):
    """Bonus multiplier is not a positive integer."""

    code: str = "INVALID_MULTIPLIER"

    def __init__(self, multiplier: object):
        self.multiplier = multiplier
        super().__init__(
            f"Bonus multiplier must be a positive integer, got {multiplier!r}"
        )


class InvalidPeriodError(PayrollValidationError):
    """Pay period month or year is out of range."""

    code: str = "INVALID_PERIOD"

    def __init__(self, year: object, month: object):
        self.year = year
        self.month = month
        super().__init__(f"Invalid pay period year={year!r} month={month!r}")


class InvalidPeriodRangeError(PayrollValidationError):
    """Period range whose start falls after its end."""

    code: str = "INVALID_PERIOD_RANGE"

    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(f"Period range start {start} is after end {end}")


# Result invariant exceptions


class ResultInvariantError(PayrollEngineError):
    """A computed result violates net = gross - withheld or non-negativity."""

    code: str = "RESULT_INVARIANT_VIOLATION"

    def __init__(self, employee_id: str, message: str):
        self.employee_id = employee_id
        super().__init__(f"Result for {employee_id}: {message}")


class MonetaryOverflowError(ResultInvariantError):
    """Amount does not fit the signed 64-bit range consumers persist."""

    code: str = "MONETARY_OVERFLOW"

    def __init__(self, field_name: str, amount: int, employee_id: str = ""):
        self.field_name = field_name
        self.amount = amount
        super().__init__(
            employee_id or "<aggregate>",
            f"{field_name}={amount} exceeds the signed 64-bit monetary range",
        )


# Payment status exceptions


class PaymentStatusError(PayrollEngineError):
    """Base exception for payment status requests."""

    code: str = "PAYMENT_STATUS_ERROR"


class InvalidStatusTransitionError(PaymentStatusError):
    """Requested status change is not a transition of the payment workflow."""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, employee_id: str, from_status: str, to_status: str):
        self.employee_id = employee_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot move payment for {employee_id} from {from_status} to {to_status}"
        )
