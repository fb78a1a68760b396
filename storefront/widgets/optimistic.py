"""Optimistic mutation helper shared by cart widgets."""
from typing import Awaitable, Callable, Optional, TypeVar

from storefront.errors import CartServiceError
from storefront.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Notifier = Callable[[str, str], None]


def log_notifier(message: str, variant: str = "info") -> None:
    """Default notifier: user-facing messages go to the log."""
    if variant == "error":
        logger.warning("[cart] %s", message)
    else:
        logger.info("[cart] %s", message)


async def run_optimistic(
    apply: Callable[[], None],
    revert: Callable[[], None],
    action: Callable[[], Awaitable[T]],
    *,
    notify: Notifier = log_notifier,
    failure_message: str,
    is_active: Callable[[], bool] = lambda: True,
) -> Optional[T]:
    """
    Apply a UI guess, run the facade call, undo the guess if the call fails.

    Args:
        apply: Puts the guessed state on screen before the call resolves
        revert: Restores the state captured before apply
        action: The facade call
        notify: notify(message, variant) for user-visible errors
        failure_message: Shown when the backend gives no message of its own
        is_active: False once the widget is torn down; late settlements are ignored

    Returns:
        The action's result, or None if it failed or the widget went away.
        Failures are never retried.
    """
    apply()
    try:
        result = await action()
    except CartServiceError as e:
        if not is_active():
            return None
        revert()
        notify(e.message or failure_message, "error")
        return None
    except Exception:
        if not is_active():
            return None
        revert()
        logger.exception("Unexpected cart failure")
        notify(failure_message, "error")
        return None

    if not is_active():
        return None
    return result
