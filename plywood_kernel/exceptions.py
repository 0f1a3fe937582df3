"""
Typed Exception Hierarchy for the Plywood Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Operators act on the message of a failure: "not enough stock" means go and
re-check the pallet, "already processed" means refresh the screen, "not
found" means the client state is stale.  Callers must be able to tell these
apart by TYPE, never by parsing the message.

Every exception:
  1. Has a typed class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        engine.press_dry(lot_id=..., machine_id=..., ...)
    except InsufficientStockError as e:
        api_response(code=e.code, lot=e.lot_id, requested=e.requested)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PlywoodKernelError (base)
    |
    +-- ValidationError
    +-- InsufficientStockError
    +-- NotFoundError
    |   +-- LotNotFoundError
    |   +-- LotAlreadyInspectedError
    |   +-- SettingNotFoundError
    |   +-- MachineNotFoundError
    |   +-- SupplierNotFoundError
    +-- SupplierReferencedError
    +-- ConfigurationError
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                    | When Raised                              | Retry?
------------------------|------------------------------------------|--------
VALIDATION_ERROR        | Bad quantity / shape / missing note      | After fix
INSUFFICIENT_STOCK      | Stage predicate failed on the source lot | No
LOT_NOT_FOUND           | Lot id does not exist                    | No
LOT_ALREADY_INSPECTED   | Lot exists but is no longer awaiting QC  | No
SETTING_NOT_FOUND       | Hot-press references unknown setting     | No
MACHINE_NOT_FOUND       | Press-dry references unknown machine     | No
SUPPLIER_NOT_FOUND      | Supplier id does not exist               | No
SUPPLIER_REFERENCED     | Deleting a supplier that lots reference  | No
CONFIGURATION_ERROR     | Missing/invalid static reference data    | Escalate
IMMUTABILITY_VIOLATION  | Update/delete of an append-only record   | Never

The kernel never retries internally.  Every failure aborts the enclosing
unit of work; retries are a caller decision after correcting input.
"""


class PlywoodKernelError(Exception):
    """
    Base exception for all plywood kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PLYWOOD_KERNEL_ERROR"


class ValidationError(PlywoodKernelError):
    """Request shape or range is invalid. Nothing was persisted."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class InsufficientStockError(PlywoodKernelError):
    """
    The source lot failed the stage predicate.

    Either the lot is absent from the stage's source warehouse, has the
    wrong kind or status, or holds less than the requested quantity.
    """

    code: str = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        lot_id: str,
        stage: str,
        requested: str,
        warehouse: str | None = None,
        kind: str | None = None,
    ):
        self.lot_id = lot_id
        self.stage = stage
        self.requested = requested
        self.warehouse = warehouse
        self.kind = kind
        material = f"{kind} material" if kind else "Material"
        where = f" in {warehouse}" if warehouse else ""
        super().__init__(
            f"{material} {lot_id} not found{where} or not enough stock "
            f"for {stage} (requested {requested})"
        )


# Not-found family


class NotFoundError(PlywoodKernelError):
    """Referenced entity is absent (usually stale client state)."""

    code: str = "NOT_FOUND"


class LotNotFoundError(NotFoundError):
    """Lot with given ID was not found."""

    code: str = "LOT_NOT_FOUND"

    def __init__(self, lot_id: str):
        self.lot_id = lot_id
        super().__init__(f"Lot not found: {lot_id}")


class LotAlreadyInspectedError(NotFoundError):
    """Lot exists but is no longer awaiting inspection."""

    code: str = "LOT_ALREADY_INSPECTED"

    def __init__(self, lot_id: str, status: str):
        self.lot_id = lot_id
        self.status = status
        super().__init__(
            f"Lot {lot_id} was already processed by QC (status: {status})"
        )


class SettingNotFoundError(NotFoundError):
    """Plywood setting record with given ID was not found."""

    code: str = "SETTING_NOT_FOUND"

    def __init__(self, setting_id: str):
        self.setting_id = setting_id
        super().__init__(f"Plywood setting not found: {setting_id}")


class MachineNotFoundError(NotFoundError):
    """Press-dryer machine with given ID was not found."""

    code: str = "MACHINE_NOT_FOUND"

    def __init__(self, machine_id: str):
        self.machine_id = machine_id
        super().__init__(f"Press-dryer machine not found: {machine_id}")


class SupplierNotFoundError(NotFoundError):
    """Supplier with given ID was not found."""

    code: str = "SUPPLIER_NOT_FOUND"

    def __init__(self, supplier_id: str):
        self.supplier_id = supplier_id
        super().__init__(f"Supplier not found: {supplier_id}")


class SupplierReferencedError(PlywoodKernelError):
    """Supplier cannot be deleted while lots reference it."""

    code: str = "SUPPLIER_REFERENCED"

    def __init__(self, supplier_id: str, lot_count: int):
        self.supplier_id = supplier_id
        self.lot_count = lot_count
        super().__init__(
            f"Supplier {supplier_id} is referenced by {lot_count} lot(s) "
            f"and cannot be deleted"
        )


class ConfigurationError(PlywoodKernelError):
    """
    Static reference data is missing or invalid.

    Fatal: the operator cannot resolve this by re-submitting.  Raised at
    startup when the warehouse topology or plant configuration is
    incomplete.
    """

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)


class ImmutabilityViolationError(PlywoodKernelError):
    """Attempted to modify or delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
