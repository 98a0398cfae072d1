"""Registration shim exposing an analytics client to other SDK components.

Handles for the application and the installation-identity source are passed
in already resolved; there is no container lookup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

PACKAGE_NAME = "@firebase/analytics-exp"
PACKAGE_VERSION = "0.0.900"

logger = logging.getLogger("analytics_interop")

EventSink = Callable[[Dict[str, Any]], None]


class Installations(Protocol):
    """Source of the installation identity used to tag analytics events."""

    def get_id(self) -> str:
        ...


class InteropComponentRegistrationFailed(RuntimeError):
    """Raised when the internal analytics component cannot be built."""

    def __init__(self, reason: BaseException) -> None:
        super().__init__(f"Firebase Analytics Interop Component failed to instantiate: {reason}")
        self.reason = reason


@dataclass
class Analytics:
    """Analytics client bound to one application."""

    app: Any
    installations: Installations
    sink: Optional[EventSink] = None
    events: List[Dict[str, Any]] = field(default_factory=list)

    def log_event(
        self,
        name: str,
        params: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        event = {
            "name": name,
            "params": dict(params or {}),
            "options": dict(options or {}),
            "installation_id": self.installations.get_id(),
        }
        logger.debug("Logging analytics event %s", name)
        if self.sink is not None:
            self.sink(event)
        else:
            self.events.append(event)


@dataclass
class AnalyticsInternal:
    """Narrow view of the analytics client shared with other components."""

    analytics: Analytics

    def log_event(
        self,
        name: str,
        params: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.analytics.log_event(name, params, options)


@dataclass
class AnalyticsComponents:
    public: Analytics
    internal: AnalyticsInternal


def factory(app: Any, installations: Installations, sink: Optional[EventSink] = None) -> Analytics:
    """Construct the public analytics client."""
    return Analytics(app=app, installations=installations, sink=sink)


def internal_factory(provider: Callable[[], Analytics]) -> AnalyticsInternal:
    """Wrap the analytics client obtained from ``provider`` for internal use."""
    try:
        analytics = provider()
    except Exception as exc:
        raise InteropComponentRegistrationFailed(exc) from exc
    return AnalyticsInternal(analytics)


def register_analytics(
    app: Any,
    installations: Installations,
    versions: Dict[str, str],
    *,
    sink: Optional[EventSink] = None,
) -> AnalyticsComponents:
    """Build the public and internal analytics components and record the version."""
    public = factory(app, installations, sink)
    internal = internal_factory(lambda: public)
    versions[PACKAGE_NAME] = PACKAGE_VERSION
    return AnalyticsComponents(public=public, internal=internal)


__all__ = [
    "Analytics",
    "AnalyticsComponents",
    "AnalyticsInternal",
    "InteropComponentRegistrationFailed",
    "factory",
    "internal_factory",
    "register_analytics",
]
