"""Client factory for the billing core."""
import importlib
import logging
from typing import Any, Optional, Union

from billing_core.auth import AuthContext

__version__ = '0.3.0'

_logging_ready = False


def load_config(config_object: Union[str, Any] = 'config.Config') -> Any:
    """Resolve a config object, accepting a dotted path like 'config.Config'."""
    if not isinstance(config_object, str):
        return config_object
    module_name, _, attr = config_object.rpartition('.')
    return getattr(importlib.import_module(module_name), attr)


def init_logging(level: Union[str, int] = 'INFO') -> None:
    """Configure root logging once per process."""
    global _logging_ready
    if _logging_ready:
        return
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
    _logging_ready = True


def create_client(config_object: Union[str, Any] = 'config.Config', auth: Optional[AuthContext] = None):
    """Create a configured BackendClient."""
    from billing_core.services.api_client import BackendClient

    config = load_config(config_object)
    init_logging(getattr(config, 'LOG_LEVEL', 'INFO'))

    if auth is None:
        auth = AuthContext(getattr(config, 'API_TOKEN', None))

    return BackendClient(
        auth,
        base_url=config.API_BASE_URL,
        timeout=config.API_TIMEOUT,
        stream_timeout=config.STREAM_CONNECT_TIMEOUT,
    )
