import functools
import logging

import click.testing
import pytest

from osbind.cli import main


@pytest.fixture(autouse=True)
def _restore_root_logging():
    logger = logging.getLogger()
    handlers = logger.handlers[:]
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main, env={'OSBIND_TOKEN': None})
