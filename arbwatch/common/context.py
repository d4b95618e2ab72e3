"""Shared application context: a name, configuration and an exit signal."""

from __future__ import annotations

import dataclasses
import enum
import logging
from dataclasses import dataclass

from arbwatch.common.channels import Broadcaster
from arbwatch.common.config import Config
from arbwatch.common.errors import GenericError

logger = logging.getLogger(__name__)


class AppMessage(enum.Enum):
    """Signals broadcast to every component of the application."""

    EXIT = "exit"
    EXIT_ON_FAILURE = "exit_on_failure"


@dataclass
class Context:
    """Name, configuration and application-wide signal channel of a component."""

    name: str
    config: Config
    app: Broadcaster[AppMessage]

    @classmethod
    def from_config(cls, config: Config) -> Context:
        """A root context named by ``app_name`` with a fresh signal channel."""
        name = config.get_string("app_name", "default")
        return cls(name=name, config=config, app=Broadcaster(10))

    def with_name(self, name: str) -> Context:
        """The same context under another name, sharing the signal channel."""
        return dataclasses.replace(self, name=name)

    def with_config(self, config: Config) -> Context:
        """The same context with other configuration."""
        return dataclasses.replace(self, config=config)

    def log_and_exit(self, message: str) -> str:
        """Log ``message`` as a warning and return the context name."""
        logger.warning("%s - %s", self.name, message)
        return self.name

    def exit(self) -> bool:
        """Broadcast the exit signal; False when nobody is listening."""
        try:
            self.app.send(AppMessage.EXIT)
        except GenericError:
            return False
        return True

    def log_and_app_exit(self) -> str:
        """Log that the exit signal arrived and return the context name."""
        return self.log_and_exit("exit signal received")