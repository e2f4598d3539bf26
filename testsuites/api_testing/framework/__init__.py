"""
================================================================================
API Testing Framework
================================================================================

Adapters satisfying the API client capability of the runtime layer.

Modules:
    - http_client: Async HTTP client with retry and Allure logging
    - config_loader: YAML configuration management

Author: Automation Team
License: MIT
================================================================================
"""

from .config_loader import ConfigLoader, ConfigurationError
from .http_client import ApiResponse, HttpClient, HttpClientError, RateLimitExceeded

__all__ = [
    "ApiResponse",
    "ConfigLoader",
    "ConfigurationError",
    "HttpClient",
    "HttpClientError",
    "RateLimitExceeded",
]
