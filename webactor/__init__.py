"""WebActor: one test vocabulary over Playwright and Selenium sessions."""

from webactor.actor import WebActor
from webactor.config import ConfigScope, HelperConfig
from webactor.drivers import BaseDriver
from webactor.exceptions import (
    AssertionFailedError,
    ConfigurationError,
    DialogStateError,
    DriverError,
    ElementNotFoundError,
    InvalidTransitionError,
    WaitTimeoutError,
    WebActorError,
)
from webactor.locator import Locator, LocatorStrategy, parse
from webactor.logger import configure_logging
from webactor.models import (
    ContextRef,
    DialogKind,
    ElementHandle,
    ElementKind,
    PendingDialog,
    PopupAction,
    TabInfo,
)

__version__ = "0.1.0"

__all__ = [
    "AssertionFailedError",
    "BaseDriver",
    "ConfigScope",
    "ConfigurationError",
    "ContextRef",
    "DialogKind",
    "DialogStateError",
    "DriverError",
    "ElementHandle",
    "ElementKind",
    "ElementNotFoundError",
    "HelperConfig",
    "InvalidTransitionError",
    "Locator",
    "LocatorStrategy",
    "PendingDialog",
    "PopupAction",
    "TabInfo",
    "WaitTimeoutError",
    "WebActor",
    "WebActorError",
    "__version__",
    "configure_logging",
    "parse",
]
