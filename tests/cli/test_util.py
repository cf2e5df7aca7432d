import logging
from unittest.mock import patch

import pytest
import structlog
from twisted.logger import STDLibLogObserver, globalLogBeginner

from lovelyswap.cli.util import (
    LoggingOptions,
    LoggingOutput,
    process_logging_options,
    process_logging_output,
    setup_logging,
)


@pytest.fixture
def restore_logging():
    yield
    structlog.reset_defaults()


def test_process_logging_output():
    argv = ['cmd', '--json-logs', '--other', 'value']
    assert process_logging_output(argv) == LoggingOutput.JSON
    assert argv == ['cmd', '--other', 'value']

    argv = ['cmd', '--disable-logs']
    assert process_logging_output(argv) == LoggingOutput.NULL
    assert argv == ['cmd']

    assert process_logging_output(['cmd']) == LoggingOutput.PRETTY


def test_process_logging_options():
    argv = ['cmd', '--debug', '--other']
    assert process_logging_options(argv) == LoggingOptions(debug=True)
    assert argv == ['cmd', '--other']
    assert process_logging_options(['cmd']) == LoggingOptions(debug=False)


def test_setup_logging(restore_logging):
    with patch.object(globalLogBeginner, 'beginLoggingTo') as begin_logging:
        setup_logging(logging_output=LoggingOutput.NULL, logging_options=LoggingOptions(debug=False))
    observers, = begin_logging.call_args.args
    assert begin_logging.call_args.kwargs == dict(redirectStandardIO=False)
    assert len(observers) == 1
    assert isinstance(observers[0], STDLibLogObserver)

    assert structlog.get_config()['wrapper_class'] is structlog.stdlib.BoundLogger
    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger('twisted').level == logging.WARNING
    assert isinstance(logging.getLogger().handlers[0], logging.NullHandler)


def test_setup_logging_debug(restore_logging):
    with patch.object(globalLogBeginner, 'beginLoggingTo'):
        setup_logging(logging_output=LoggingOutput.JSON, logging_options=LoggingOptions(debug=True))
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger('twisted').level == logging.INFO
    assert isinstance(logging.getLogger().handlers[0], logging.StreamHandler)
