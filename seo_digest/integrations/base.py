"""Declared failure policies for provider operations.

Each provider operation is wrapped with :func:`provider_operation`, which
states whether a failure aborts the enclosing report (``FATAL``) or falls
back to a documented default (``DEGRADE``).  The policy is stored on the
wrapped function so it can be enumerated with :func:`operation_policies`.
"""

import asyncio
import copy
import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from seo_digest.errors import DegradedMetricError, ProviderError, classify_provider_error

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    FATAL = "fatal"
    DEGRADE = "degrade"


@dataclass(frozen=True)
class OperationPolicy:
    policy: FailurePolicy
    default: Any = None


def provider_operation(
    policy: FailurePolicy,
    default: Any = None,
    fallback: Optional[Callable[..., Any]] = None,
):
    """Decorate an async provider method with its failure policy.

    Args:
        policy: ``FATAL`` re-raises failures as a classified
            :class:`ProviderError`; ``DEGRADE`` logs them and returns a
            copy of *default* (or the result of *fallback*, called with
            the method's arguments).
        default: Value returned by degraded operations.
        fallback: Optional callable producing the degraded value.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                if policy is FailurePolicy.FATAL:
                    error = classify_provider_error(self.provider_name, exc)
                    if not isinstance(exc, ProviderError):
                        logger.error("%s.%s failed: %s", self.provider_name, func.__name__, exc)
                    raise error from exc
                logger.warning("%s", DegradedMetricError(self.provider_name, func.__name__, exc))
                if fallback is not None:
                    return fallback(self, *args, **kwargs)
                return copy.deepcopy(default)

        wrapper.operation_policy = OperationPolicy(policy, default)
        return wrapper

    return decorator


def operation_policies(provider_cls: type) -> dict[str, OperationPolicy]:
    """Return ``{operation_name: OperationPolicy}`` for a provider class."""
    policies: dict[str, OperationPolicy] = {}
    for name in dir(provider_cls):
        attr = getattr(provider_cls, name, None)
        policy = getattr(attr, "operation_policy", None)
        if isinstance(policy, OperationPolicy):
            policies[name] = policy
    return policies


class BaseProvider:
    """Common surface of the metric providers."""

    provider_name = "provider"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
