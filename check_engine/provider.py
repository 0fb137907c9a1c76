"""
Check Engine - Provider Bootstrap.

============================================================
PURPOSE
============================================================
Configures the engine once per run and hands out services.

STEPS:
1. Require an API key ("Missing API Key" otherwise)
2. Default the base URL
3. Build one adapter per resource kind
4. Verify authentication
5. Return a ProviderContext

REGISTERED:
    resources:    http_check, api_check
    data sources: check_results

============================================================
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Union

from .adapters.base import CheckAdapter
from .adapters.factory import AdapterFactory
from .clock import ClockProtocol, get_clock
from .config import DEFAULT_BASE_URL, ProviderConfig, ResultsConfig
from .datasource import DATA_SOURCE_TYPE, CheckResultsDataSource
from .errors import ConfigurationError
from .schema import get_schema
from .service import CheckResourceService
from .types import CheckKind


logger = logging.getLogger(__name__)


RESOURCE_TYPES: List[str] = [kind.value for kind in CheckKind]
DATA_SOURCE_TYPES: List[str] = [DATA_SOURCE_TYPE]


class ProviderContext:
    """
    Configured provider: services per resource type plus the
    results data source.
    """

    def __init__(
        self,
        config: ProviderConfig,
        adapters: Dict[CheckKind, CheckAdapter],
        clock: ClockProtocol,
        results_config: Optional[ResultsConfig] = None,
    ):
        self._config = config
        self._adapters = adapters
        self._clock = clock
        self._services = {
            kind: CheckResourceService(get_schema(kind), adapter, clock)
            for kind, adapter in adapters.items()
        }
        # Results are served by the HTTP check backend, matching the API
        self._results = CheckResultsDataSource(
            adapters[CheckKind.HTTP_CHECK], clock, results_config,
        )

    @property
    def config(self) -> ProviderConfig:
        return self._config

    def service(self, kind: Union[CheckKind, str]) -> CheckResourceService:
        """Service for a resource kind or type name."""
        return self._services[get_schema(kind).kind]

    def adapter(self, kind: Union[CheckKind, str]) -> CheckAdapter:
        return self._adapters[get_schema(kind).kind]

    def data_source(self, type_name: str = DATA_SOURCE_TYPE) -> CheckResultsDataSource:
        if type_name != DATA_SOURCE_TYPE:
            raise ConfigurationError(
                f"Unsupported data source: {type_name}",
                config_key="data_source",
            )
        return self._results

    @property
    def results(self) -> CheckResultsDataSource:
        return self._results


class CheckProvider:
    """Entry point: validates provider configuration and verifies auth."""

    def __init__(self, clock: Optional[ClockProtocol] = None, **adapter_options):
        self._clock = clock or get_clock()
        self._adapter_options = adapter_options

    @property
    def resource_types(self) -> List[str]:
        return list(RESOURCE_TYPES)

    @property
    def data_source_types(self) -> List[str]:
        return list(DATA_SOURCE_TYPES)

    def configure(
        self,
        config: ProviderConfig,
        results_config: Optional[ResultsConfig] = None,
    ) -> ProviderContext:
        """
        Configure the provider.

        Raises:
            ConfigurationError: Missing API key, unknown backend or failed auth
        """
        if not config.api_key:
            raise ConfigurationError(
                "Missing API Key",
                config_key="api_key",
                code="CFG_MISSING_API_KEY",
            )
        if not config.base_url:
            config = replace(config, base_url=DEFAULT_BASE_URL)

        adapters = AdapterFactory.create_all(config, self._clock, **self._adapter_options)
        for adapter in adapters.values():
            adapter.verify_auth()

        logger.info(f"Configured provider (backend={config.backend}, base_url={config.base_url})")
        return ProviderContext(config, adapters, self._clock, results_config)
