from __future__ import annotations
import logging
import sys
import structlog

PREVIEW_CHARS = 50
_CONTENT_KEYS = ("content", "preview")

def clip_content(_logger, _method, event_dict):
    """Never let a full clipboard payload reach a log line."""
    for key in _CONTENT_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > PREVIEW_CHARS:
            event_dict[key] = value[:PREVIEW_CHARS] + "..."
    return event_dict

def configure_logging(debug: bool = False, json_logs: bool = True) -> None:
    level = logging.DEBUG if debug else logging.INFO
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            clip_content,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    # stderr keeps stdout free for CLI output
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
