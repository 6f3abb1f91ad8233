"""
Logging and request tracing for the relay.

Provides:
- Structured JSON logging (LOG_FORMAT=json)
- A correlation ID per request, echoed back in the X-Correlation-ID header
- One completion log line per request with status and latency
"""

import json
import logging
import time
import uuid
from datetime import datetime, timezone

from flask import Flask, g, has_request_context, request

logger = logging.getLogger(__name__)


class JSONLogFormatter(logging.Formatter):
    """
    JSON log formatter.

    Each record becomes one JSON object per line, with the correlation ID of
    the current request attached when there is one.
    """

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'component': 'codefix',
        }

        correlation_id = getattr(record, 'correlation_id', None)
        if not correlation_id and has_request_context():
            correlation_id = getattr(g, 'correlation_id', None)
        if correlation_id:
            log_entry['correlation_id'] = correlation_id

        if record.exc_info and record.exc_info[0]:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
            }

        return json.dumps(log_entry)


def configure_logging(app: Flask):
    """Configure text or structured JSON logging from the app config."""
    log_level = str(app.config.get('LOG_LEVEL', 'INFO')).upper()
    level = getattr(logging, log_level, logging.INFO)

    if str(app.config.get('LOG_FORMAT', 'text')).lower() == 'json':
        handler = logging.StreamHandler()
        handler.setFormatter(JSONLogFormatter())
        app.logger.handlers = [handler]
        logging.root.handlers = [handler]
        app.logger.setLevel(level)
        logging.root.setLevel(level)
        app.logger.info("Structured JSON logging configured")
    else:
        logging.basicConfig(level=level)
        app.logger.setLevel(level)
        app.logger.info("Using default text logging (set LOG_FORMAT=json for structured logs)")


def register_request_logging(app: Flask):
    """Register correlation ID and request timing hooks."""

    @app.before_request
    def start_timer():
        g.request_start_time = time.time()
        g.correlation_id = request.headers.get(
            'X-Correlation-ID',
            request.headers.get('X-Request-ID', f"req-{uuid.uuid4().hex[:12]}")
        )

    @app.after_request
    def log_request(response):
        start = getattr(g, 'request_start_time', None)
        if start:
            latency_ms = (time.time() - start) * 1000
            correlation_id = getattr(g, 'correlation_id', None)
            if correlation_id:
                response.headers['X-Correlation-ID'] = correlation_id
            response.headers['X-Response-Time'] = f"{latency_ms:.2f}ms"
            logger.info(f"{request.method} {request.path} -> {response.status_code} ({latency_ms:.2f}ms)")

        return response

    logger.info("Request logging middleware registered")
