# =============================================================================
# core/services/compensation.py - Undoing Partial Multi-Step Writes
# =============================================================================
# PostgREST gives us single-statement atomicity only. Operations that write
# more than one row (approve: status + star event + XP, redeem: debit +
# reward) undo their earlier steps when a later one fails.
#
# Each undo step is attempted once. If every undo succeeds the caller sees
# the original failure as an UpstreamError; if any undo fails too, the
# error carries both messages so the ledger can be reconciled by hand.
# =============================================================================

import logging
from typing import Callable, NoReturn

from app.exceptions import CompensationFailedError, LuckyLoveException, StoreError

logger = logging.getLogger(__name__)


def compensate(
    operation: str,
    error: Exception,
    undo_steps: list[tuple[str, Callable[[], object]]],
) -> NoReturn:
    """
    Run undo steps for a failed operation, then raise.

    Args:
        operation: Name used in logs and the error, e.g. "redeem_reward"
        error: The failure that triggered the rollback
        undo_steps: (description, callable) pairs, run in order

    Raises:
        CompensationFailedError: If any undo step failed
        LuckyLoveException: The original error when it already is one
        StoreError: For store failures (UpstreamError family)
    """
    failures: list[str] = []

    for description, step in undo_steps:
        try:
            step()
            logger.info(f"Compensated {operation}: {description}")
        except Exception as undo_error:
            logger.error(f"Compensation for {operation} failed ({description}): {undo_error}")
            failures.append(f"{description}: {undo_error}")

    if failures:
        raise CompensationFailedError(
            operation=operation,
            error=str(error),
            compensation_error="; ".join(failures),
        ) from error

    if isinstance(error, LuckyLoveException):
        raise error
    raise StoreError(error) from error
