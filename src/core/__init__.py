"""Core infrastructure package for shared application functionality.

- **config**: Centralized configuration management with environment support
- **context**: Request context with correlation ids and API versions
- **exceptions**: Structured exception hierarchy with error codes
- **logging**: Structured logging with Loguru
- **types**: Type aliases for dynamic data
"""
