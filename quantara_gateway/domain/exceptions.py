"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Requested entity does not exist"""

    pass


class InvalidTransitionError(DomainException):
    """Contract status change not present in the transition table"""

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        super().__init__(f"Invalid transition: {source} -> {target}")


class InsufficientCapitalError(DomainException):
    """Allocation exceeds the pool's available capital"""

    def __init__(self, requested: float, available: float):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient pool capacity: requested {requested}, available {available}"
        )


class ConcurrentModificationError(DomainException):
    """Entity changed between read and write (stale version)"""

    pass
