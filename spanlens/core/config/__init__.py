"""
Configuration Module

Centralized, type-safe configuration management.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Wire-format literals, enums, and fixed limits
- **provider_registry.py**: Token-stream provider registration logic

Usage:
------
```python
from spanlens.core.config import get_settings
from spanlens.core.config.constants import LookupSource

settings = get_settings()
interval = settings.client.STREAM_UPDATE_INTERVAL
```

Environment Variables:
---------------------
```bash
XAI_API_KEY=xai-...
USE_FAKE_LLM=true
RELAY_BASE_URL=http://localhost:3001
LOG_FORMAT=console
```
"""

from .settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
