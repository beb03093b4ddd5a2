"""Unit tests for the JSON log formatter in logging.py."""

import json
import sys
import logging

import pytest

from shortlink.utils.logging import JsonFormatter, RequestContextFilter, bind_request, log_level


def make_record(message: str, extra: dict | None = None, exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name='shortlink.services.rate_limiter',
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=exc_info,
    )
    for key, value in (extra or {}).items():
        setattr(record, key, value)
    return record


def test_format_includes_standard_fields():
    log = json.loads(JsonFormatter().format(make_record('Rate limit exceeded for client.')))

    assert log['level'] == 'WARNING'
    assert log['logger'] == 'shortlink.services.rate_limiter'
    assert log['message'] == 'Rate limit exceeded for client.'
    assert log['timestamp'].endswith('Z')


def test_format_includes_extra_fields():
    record = make_record('Rate limit exceeded for client.', extra={'event': 'RATE_LIMIT_EXCEEDED', 'count': 31})
    log = json.loads(JsonFormatter().format(record))

    assert log['event'] == 'RATE_LIMIT_EXCEEDED'
    assert log['count'] == 31
    assert 'msg' not in log
    assert 'args' not in log


def test_format_includes_exception():
    try:
        raise RuntimeError('boom')
    except RuntimeError:
        record = make_record('Unhandled exception.', exc_info=sys.exc_info())

    log = json.loads(JsonFormatter().format(record))
    assert 'RuntimeError: boom' in log['exception']


def test_format_serializes_unknown_types():
    record = make_record('Odd extra.', extra={'when': object()})
    log = json.loads(JsonFormatter().format(record))
    assert log['when'].startswith('<object object')


def test_request_filter_stamps_bound_request_id():
    record = make_record('Link created.')

    bind_request('c6af9ac6-7b61-11e6-9a41-93e8deadbeef')
    try:
        assert RequestContextFilter().filter(record) is True
    finally:
        bind_request(None)

    log = json.loads(JsonFormatter().format(record))
    assert log['requestId'] == 'c6af9ac6-7b61-11e6-9a41-93e8deadbeef'


def test_request_filter_without_bound_request():
    record = make_record('Link created.')

    RequestContextFilter().filter(record)

    assert 'requestId' not in json.loads(JsonFormatter().format(record))


@pytest.mark.parametrize(
    'value, expected',
    [
        (None, 'INFO'),
        ('debug', 'DEBUG'),
        ('WARNING', 'WARNING'),
        ('verbose', 'INFO'),
    ],
)
def test_log_level(monkeypatch, value, expected):
    if value is None:
        monkeypatch.delenv('LOG_LEVEL', raising=False)
    else:
        monkeypatch.setenv('LOG_LEVEL', value)

    assert log_level() == expected
