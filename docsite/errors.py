from __future__ import annotations


class DocsiteError(Exception):
    pass


class ConfigError(DocsiteError):
    """Settings or navigation file is unreadable or has the wrong shape."""


class FatalParseError(DocsiteError):
    """A source document cannot be parsed; the build stops here."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason
