import secrets
import time
from random import Random
from typing import Optional
from unittest import main as ut_main

from structlog import get_logger
from twisted.internet.task import Clock
from twisted.trial import unittest

from lovelyswap.conf.get_settings import get_global_settings

logger = get_logger()
main = ut_main


class TestCase(unittest.TestCase):
    seed_config: Optional[int] = None

    def setUp(self) -> None:
        self.clock = Clock()
        self.clock.advance(int(time.time()))
        self.reactor = self.clock
        self.log = logger.new()
        self.seed = secrets.randbits(64) if self.seed_config is None else self.seed_config
        self.log.info('set seed', seed=self.seed)
        self.rng = Random(self.seed)
        self._settings = get_global_settings()
