from __future__ import annotations

import json
import logging
import sys
from logging import Logger

ROOT_LOGGER_NAME = "smartspend"
HANDLER_NAME = "smartspend.stdout"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        stage = getattr(record, "stage", None)
        if stage:
            payload["stage"] = stage
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def get_logger(name: str = ROOT_LOGGER_NAME, json_output: bool = True) -> Logger:
    """Return a logger under the ``smartspend`` namespace.

    Handlers are attached to the root ``smartspend`` logger only once, so
    module loggers (``smartspend.advisor`` and friends) share its output.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not any(h.get_name() == HANDLER_NAME for h in root.handlers):
        root.setLevel(logging.INFO)

        handler = logging.StreamHandler(stream=sys.stdout)
        handler.set_name(HANDLER_NAME)
        if json_output:
            handler.setFormatter(JsonFormatter())
        else:
            handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

        root.addHandler(handler)
        root.propagate = False

    return logging.getLogger(name)
