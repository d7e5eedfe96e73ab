"""
Utils Module - Infrastructure Utilities
=======================================

Modules:
    logger: Application logger plus the per-API interaction log sink
    http_logger: Optional httpx request/response logging
    client_factory: AsyncOpenAI / httpx client construction
    json_utils: Compact and safe JSON serialization of SDK objects
    usage: Token usage and response metadata extraction
    pricing: Cost estimates for tokens, images, video, speech and transcription

Logging (logger.py):
    - Console handler: human-readable, colored by level
    - Error handler: JSON Lines to ``<log_dir>/errors.jsonl``
    - InteractionLogger: JSON Lines to ``<log_dir>/<YYYY-MM-DD>/<api>.log``

Example:
    Structured logging::

        from utils.logger import logger

        logger.info("Stream finished", response_id="resp_123", tokens=1234)
"""
