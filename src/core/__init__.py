"""
Core Layer - Configuration and Constants
========================================

Modules:
    constants: Model defaults, endpoint labels, polling and pricing constants,
        logging sizes, and the Pydantic ``Settings`` loaded from the
        environment / ``.env``.

Configuration (constants.py):
    Centralized configuration using Pydantic Settings for validation:
    - OpenAI API key, base URL, timeout and retry budget
    - Default models for text and image responses
    - Log level, log directory and debug echo of interaction records

    ``get_settings()`` is cached; tests patch it in ``tests/conftest.py``.

See Also:
    :mod:`utils.client_factory`: Builds the AsyncOpenAI client from settings
    :mod:`utils.logger`: Logging setup driven by these settings
"""
