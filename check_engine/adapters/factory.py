"""
Check Backend Adapter Factory.

============================================================
PURPOSE
============================================================
Factory pattern for creating check adapter instances.

FEATURES:
- Centralized adapter creation
- Configuration injection (API key, base URL)
- Adapter registry for extension

============================================================
USAGE
============================================================
```python
config = ProviderConfig(api_key="...")
adapter = AdapterFactory.create("http_check", config=config)

# Register another backend
AdapterFactory.register("recording", RecordingAdapter)
```

============================================================
"""

import logging
from typing import Any, Dict, List, Optional, Type, Union

from ..clock import ClockProtocol
from ..config import ProviderConfig
from ..errors import ConfigurationError
from ..schema import get_schema
from ..types import CheckKind
from .base import CheckAdapter
from .mock import MockCheckAdapter


logger = logging.getLogger(__name__)


class AdapterFactory:
    """
    Factory for creating check adapters.

    Backends are looked up by ProviderConfig.backend.
    """

    _registry: Dict[str, Type[CheckAdapter]] = {
        "mock": MockCheckAdapter,
    }

    @classmethod
    def register(cls, backend_id: str, adapter_class: Type[CheckAdapter]) -> None:
        """Register an adapter class under a backend id."""
        cls._registry[backend_id.lower()] = adapter_class
        logger.info(f"Registered check backend: {backend_id}")

    @classmethod
    def list_supported(cls) -> List[str]:
        return sorted(cls._registry)

    @classmethod
    def create(
        cls,
        kind: Union[CheckKind, str],
        config: Optional[ProviderConfig] = None,
        clock: Optional[ClockProtocol] = None,
        **kwargs: Any,
    ) -> CheckAdapter:
        """
        Create an adapter for one resource kind.

        Args:
            kind: Resource kind or type name ("http_check", "api_check")
            config: Provider configuration (API key, base URL, backend)
            clock: Clock injected into the adapter
            **kwargs: Backend-specific options

        Raises:
            ConfigurationError: Unknown kind or backend
        """
        config = config or ProviderConfig()
        schema = get_schema(kind)

        backend_id = config.backend.lower()
        adapter_class = cls._registry.get(backend_id)
        if adapter_class is None:
            raise ConfigurationError(
                f"Unsupported backend: {config.backend}. "
                f"Supported: {', '.join(cls.list_supported())}",
                config_key="backend",
            )

        adapter = adapter_class(schema, config=config, clock=clock, **kwargs)
        logger.debug(f"Created {backend_id} adapter for {schema.type_name}")
        return adapter

    @classmethod
    def create_all(
        cls,
        config: Optional[ProviderConfig] = None,
        clock: Optional[ClockProtocol] = None,
        **kwargs: Any,
    ) -> Dict[CheckKind, CheckAdapter]:
        """Create one adapter per resource kind."""
        return {kind: cls.create(kind, config, clock, **kwargs) for kind in CheckKind}
