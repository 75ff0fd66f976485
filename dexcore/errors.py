"""Protocol error classes.

Errors are grouped the way failures are handled: precondition and
authorization failures are rejected before any state change, invariant and
liquidity failures unwind the side effects of the enclosing transaction.
"""


class ProtocolError(Exception):
    """Base error for every protocol failure."""

    pass


# --- Preconditions ---


class PreconditionError(ProtocolError):
    """Malformed input rejected before any state mutation."""

    pass


class IdenticalAddresses(PreconditionError):
    """Both tokens of a pair are the same."""

    pass


class ZeroAddress(PreconditionError):
    """A token address is the zero address."""

    pass


class PairExists(PreconditionError):
    """A pair already exists for the unordered token pair."""

    pass


class InsufficientOutputAmount(PreconditionError):
    """A swap requested no output at all."""

    pass


class InsufficientInputAmount(PreconditionError):
    """A swap received no input."""

    pass


class InsufficientAmount(PreconditionError):
    """A quote was requested for a zero amount."""

    pass


class InvalidTo(PreconditionError):
    """Swap recipient is one of the pair's own tokens."""

    pass


class ForbiddenFee(PreconditionError):
    """Swap fee above the 10% ceiling."""

    pass


class InvalidProtocolFeeDenominator(PreconditionError):
    """Protocol fee denominator is negative."""

    pass


class InvalidPath(PreconditionError):
    """A routing path has fewer than two tokens."""

    pass


class InvalidBootstrapValue(PreconditionError):
    """Bootstrap funding does not match the configured value."""

    pass


class InsufficientBalance(PreconditionError):
    """Token or native balance too low for a transfer."""

    pass


class InsufficientAllowance(PreconditionError):
    """Allowance too low for a delegated transfer."""

    pass


class UnknownContract(PreconditionError):
    """No contract (of the expected kind) is deployed at an address."""

    pass


class AddressInUse(PreconditionError):
    """A contract is already deployed at the derived address."""

    pass


class TransferRejected(PreconditionError):
    """The receiving contract does not accept native value."""

    pass


# --- Authorization ---


class AuthorizationError(ProtocolError):
    """Caller does not hold the role an operation requires."""

    pass


class Forbidden(AuthorizationError):
    """Caller is not the owner / fee authority / pair owner."""

    pass


class CallerNotAuthorized(AuthorizationError):
    """Bootstrap funding sent by someone other than the authorized funder."""

    pass


# --- Invariants ---


class InvariantError(ProtocolError):
    """A post-condition of the pool invariant does not hold."""

    pass


class KInvariantViolation(InvariantError):
    """Fee-adjusted reserve product decreased across a swap ("K")."""

    pass


class InsufficientLiquidityMinted(InvariantError):
    """A deposit would mint zero shares."""

    pass


class InsufficientLiquidityBurned(InvariantError):
    """A withdrawal would return zero of either token."""

    pass


class Overflow(InvariantError):
    """A balance no longer fits in the 112-bit reserve domain."""

    pass


# --- Liquidity ---


class LiquidityError(ProtocolError):
    """Not enough liquidity to serve a trade."""

    pass


class InsufficientLiquidity(LiquidityError):
    """Requested output meets or exceeds reserves, or a route has no liquidity."""

    pass


# --- State machine ---


class StateError(ProtocolError):
    """Operation not allowed in the current lifecycle state."""

    pass


class WrongState(StateError):
    """Bootstrap deployer is not in the state the operation requires."""

    pass
