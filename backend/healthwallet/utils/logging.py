"""
Structured application logging.

Service modules log events through structlog; everything is rendered as one
JSON object per line on stdout. Only ids go into events, never health values.
"""
import sys
import logging
import structlog

_HANDLER_NAME = 'healthwallet-json'


def setup_logging(app):
    """Configure structlog JSON output for the healthwallet logger tree."""

    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    app_logger = logging.getLogger('healthwallet')
    app_logger.setLevel(level)

    # create_app may run many times in one process (tests); attach the handler once
    if not any(h.get_name() == _HANDLER_NAME for h in app_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter('%(message)s'))
        app_logger.addHandler(handler)


def get_logger(name):
    return structlog.get_logger(name)
