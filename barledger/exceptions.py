"""
Exceptions raised by the barledger package.

Argument problems detected at construction time (a missing starting
side, two orders of the same side, mismatched cost models) are plain
`ValueError`s.  The classes below cover the cases that are specific to
this package.
"""


class BarLedgerError(Exception):
    """Base class for all barledger specific errors."""
    pass


class TradeStateError(BarLedgerError, RuntimeError):
    """Raised when a trade or trading record is operated out of order.

    Examples are operating a trade that is already closed, exiting at an
    index earlier than the entry, or asking for the holding cost of an
    open trade without an observation index.
    """
    pass


class ConfigError(BarLedgerError, ValueError):
    """Raised when the YAML configuration holds an invalid value."""
    pass
