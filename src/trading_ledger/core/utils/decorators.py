"""
Utility decorators for trade logging.
"""

import functools
import inspect
import time
import uuid
from collections.abc import Callable
from dataclasses import fields, is_dataclass
from typing import Any, TypeVar

from loguru import logger

F = TypeVar("F", bound=Callable[..., Any])

_TRADING_PARAMS = (
    "owner_id",
    "asset_class",
    "action",
    "symbol",
    "quantity",
    "size",
    "price",
    "leverage",
    "direction",
)


def _serialize_parameter_value(value: Any) -> Any:
    """Serialize parameter value for logging."""
    if hasattr(value, "value"):
        return str(value.value)  # Handle enum values
    elif hasattr(value, "quantize"):
        return str(value)  # Handle Decimal types
    else:
        return value


def _extract_trading_context(bound_args: inspect.BoundArguments) -> dict[str, Any]:
    """Extract trading context from function arguments.

    Dataclass arguments (trade commands) contribute their own trading fields.
    """
    context: dict[str, Any] = {}
    for param_name, value in bound_args.arguments.items():
        if param_name == "self":
            owner_id = getattr(value, "owner_id", None)
            if isinstance(owner_id, str):
                context["owner_id"] = owner_id
            continue
        if is_dataclass(value) and not isinstance(value, type):
            for item in fields(value):
                if item.name in _TRADING_PARAMS and getattr(value, item.name) is not None:
                    context[item.name] = _serialize_parameter_value(getattr(value, item.name))
        elif param_name in _TRADING_PARAMS and value is not None:
            context[param_name] = _serialize_parameter_value(value)
    return context


def _outcome_context(
    base_context: dict[str, Any],
    started: float,
    result: Any = None,
    error: Exception | None = None,
) -> dict[str, Any]:
    """Merge the outcome of a trading operation into its logging context."""
    context = {
        **base_context,
        "success": error is None,
        "execution_time_ms": round((time.perf_counter() - started) * 1000, 2),
    }
    if error is not None:
        context["error_type"] = type(error).__name__
        context["error_message"] = str(error)
        return context

    context["result_type"] = type(result).__name__
    realized_pnl = getattr(result, "realized_pnl", None)
    if realized_pnl is not None:
        context["realized_pnl"] = str(realized_pnl)
    return context


def _setup_logging_context(
    func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
) -> dict[str, Any]:
    """Setup logging context for trading operations."""
    bound_args = inspect.signature(func).bind(*args, **kwargs)
    bound_args.apply_defaults()

    return {
        "correlation_id": str(uuid.uuid4())[:8],
        **_extract_trading_context(bound_args),
    }


def log_trades(func: F) -> F:
    """Decorator to log trading operations with correlation IDs.

    Emits a DEBUG start record, then an INFO completion record with the
    execution time, or an INFO rejection record carrying the exception type
    before re-raising.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        context = _setup_logging_context(func, args, kwargs)
        func_name = func.__name__

        logger.bind(**context).debug(f"Trading operation started: {func_name}")
        started = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.bind(**_outcome_context(context, started, error=e)).info(
                f"Trading operation rejected: {func_name}: {e}"
            )
            raise

        logger.bind(**_outcome_context(context, started, result=result)).info(
            f"Trading operation completed: {func_name}"
        )
        return result

    return wrapper  # type: ignore
