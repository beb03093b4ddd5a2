"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` in the lambda handler's `__init__.py` file
before any other logging is done.

Every record is written to stdout as one JSON object per line:
{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "WARNING",
    "logger": "shortlink.services.rate_limiter",
    "message": "Rate limit exceeded for client.",
    "requestId": "c6af9ac6-7b61-11e6-9a41-93e8deadbeef",
    "event": "RATE_LIMIT_EXCEEDED",
    "count": 31
}

`extra=` fields are copied as top-level keys. `requestId` is present while a
Lambda invocation is bound via `bind_request()` (done by guarantee_500_response).
"""

import os
import json
import logging
import logging.config
from contextvars import ContextVar
from datetime import datetime, UTC

from shortlink.constants import ENV


_request_id: ContextVar[str | None] = ContextVar('request_id', default=None)

# Attributes every LogRecord carries, anything else came in through `extra=`
RESERVED_ATTRS = frozenset(logging.LogRecord('', logging.INFO, '', 0, '', (), None).__dict__) | {'message', 'asctime'}


def bind_request(request_id: str | None) -> None:
    _request_id.set(request_id)


class RequestContextFilter(logging.Filter):
    """Stamp records with the id of the Lambda invocation being served"""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = _request_id.get()
        if request_id is not None and not hasattr(record, 'requestId'):
            record.requestId = request_id
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
        log = {
            'timestamp': timestamp,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        log.update({key: value for key, value in record.__dict__.items() if key not in RESERVED_ATTRS})
        return json.dumps(log, default=str)


def log_level() -> str:
    level = os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper()
    return level if level in logging.getLevelNamesMapping() else 'INFO'


def initialize_logging() -> None:
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'filters': {
                'request': {'()': RequestContextFilter},
            },
            'formatters': {
                'json': {'()': JsonFormatter},
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'filters': ['request'],
                    'stream': 'ext://sys.stdout',
                }
            },
            'root': {
                'level': log_level(),
                'handlers': ['stdout'],
            },
        }
    )
