from __future__ import annotations

import logging
import sys

from web_search_mcp.urls import redact_url

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_URL_FIELDS = frozenset({"url", "request_url"})


def configure_logging(level: str = "INFO") -> None:
    # stdout belongs to the MCP stdio transport.
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


class EventLogger:
    """Emits named events with ``key=value`` fields on a standard logger.

    URL fields always have their search terms redacted. With ``sanitize`` on,
    a ``query`` field is replaced by its length.
    """

    def __init__(
        self, logger: logging.Logger | None = None, *, sanitize: bool = True
    ) -> None:
        self._logger = logger or logging.getLogger("web_search_mcp.events")
        self._sanitize = sanitize

    @property
    def sanitize(self) -> bool:
        return self._sanitize

    def child(self, name: str) -> EventLogger:
        return EventLogger(logging.getLogger(name), sanitize=self._sanitize)

    def debug(self, event: str, **fields: object) -> None:
        self.emit(logging.DEBUG, event, **fields)

    def info(self, event: str, **fields: object) -> None:
        self.emit(logging.INFO, event, **fields)

    def warning(self, event: str, **fields: object) -> None:
        self.emit(logging.WARNING, event, **fields)

    def error(self, event: str, **fields: object) -> None:
        self.emit(logging.ERROR, event, **fields)

    def emit(self, level: int, event: str, **fields: object) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, "event=%s %s", event, self.render(fields))

    def render(self, fields: dict[str, object]) -> str:
        rendered = dict(fields)
        if "query" in rendered and self._sanitize:
            query = rendered.pop("query")
            rendered["query_length"] = len(query) if isinstance(query, str) else 0
        for key in _URL_FIELDS & rendered.keys():
            rendered[key] = redact_url(str(rendered[key]))
        return " ".join(
            f"{key}={_flatten(value)}" for key, value in sorted(rendered.items())
        )


def _flatten(value: object) -> str:
    return " ".join(str(value).split()) or "-"
