"""Services for registration, diagnostics, environment selection and links."""
from .remote_client import NotificationServiceClient
from .environment import EnvironmentSelector, ServerEnvironment
from .reconciler import RegistrationReconciler, RegistrationOutcome
from .diagnostics import DiagnosticsSynchronizer
from .deep_link import DeepLinkRouter
from .health_refresher import HealthRefresher
from .container import ClientServices, build_services, get_services

__all__ = [
    "NotificationServiceClient",
    "EnvironmentSelector",
    "ServerEnvironment",
    "RegistrationReconciler",
    "RegistrationOutcome",
    "DiagnosticsSynchronizer",
    "DeepLinkRouter",
    "HealthRefresher",
    "ClientServices",
    "build_services",
    "get_services",
]
