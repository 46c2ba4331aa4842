"""Wiring of the client services around one injected store."""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from fastapi import Request

from ..config import Settings, settings as default_settings
from ..store import KeyValueStore
from ..utils.retry import RetryPolicy
from .deep_link import DeepLinkRouter
from .diagnostics import DiagnosticsSynchronizer
from .environment import EnvironmentSelector, ServerEnvironment, base_urls_from_settings
from .health_refresher import HealthRefresher
from .reconciler import RegistrationReconciler
from .remote_client import NotificationServiceClient


@dataclass
class ClientServices:
    """Everything the local API needs, sharing a single store and client."""
    store: KeyValueStore
    client: NotificationServiceClient
    environment: EnvironmentSelector
    reconciler: RegistrationReconciler
    diagnostics: DiagnosticsSynchronizer
    deep_links: DeepLinkRouter
    health_refresher: HealthRefresher


def build_services(
    store: KeyValueStore,
    client: Optional[NotificationServiceClient] = None,
    config: Optional[Settings] = None,
    base_urls: Optional[Dict[ServerEnvironment, str]] = None,
    opener: Optional[Callable[[str], Any]] = None,
) -> ClientServices:
    config = config or default_settings
    client = client or NotificationServiceClient(timeout=config.request_timeout_seconds)
    environment = EnvironmentSelector(store, client, base_urls or base_urls_from_settings(config))
    reconciler = RegistrationReconciler(
        store,
        client,
        environment,
        RetryPolicy(
            max_attempts=config.register_max_attempts,
            base_delay=config.register_base_delay_seconds,
        ),
    )
    diagnostics = DiagnosticsSynchronizer(
        store,
        client,
        environment,
        settle_delay=config.check_settle_delay_seconds,
        poll_timeout=config.check_poll_timeout_seconds,
    )
    return ClientServices(
        store=store,
        client=client,
        environment=environment,
        reconciler=reconciler,
        diagnostics=diagnostics,
        deep_links=DeepLinkRouter(opener),
        health_refresher=HealthRefresher(environment, config.health_refresh_seconds),
    )


def get_services(request: Request) -> ClientServices:
    """Dependency to get the services attached to the running app."""
    return request.app.state.services
