"""Formatted console messages for session start and shutdown."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

COLOR_INFO = "\x1b[1;36m"  # bold cyan
COLOR_SUCCESS = "\x1b[1;32m"  # bold green
COLOR_RESET = "\x1b[0m"


class MessageKind(Enum):
    INFO = ("INFO", COLOR_INFO)
    SUCCESS = ("SUCCESS", COLOR_SUCCESS)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def color(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class SessionMessage:
    kind: MessageKind
    text: str

    @classmethod
    def info(cls, msg: str) -> "SessionMessage":
        return cls(MessageKind.INFO, msg)

    @classmethod
    def success(cls, msg: str) -> "SessionMessage":
        return cls(MessageKind.SUCCESS, msg)

    def render(self) -> str:
        """The message with its coloured level tag."""
        return f"{self.kind.color}[{self.kind.label}]{COLOR_RESET} {self.text}"

    def print(self) -> None:
        print(self.render())


def print_session_starting(mode: str, node_id: int) -> None:
    SessionMessage.info(f"Starting {mode} mode with Node ID: {node_id}").print()


def print_session_shutdown() -> None:
    SessionMessage.info("Shutting down...").print()


def print_session_exit_success() -> None:
    SessionMessage.success("Nexus CLI exited successfully").print()