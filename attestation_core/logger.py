import logging, json, sys, time, os


class JsonLineFormatter(logging.Formatter):
    """
    One JSON object per record. A dict message (see ``event``) is nested as
    an object under "msg"; anything else becomes its formatted string.
    """

    converter = time.gmtime  # UTC timestamps

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%SZ")

    def format(self, record: logging.LogRecord) -> str:
        msg = record.msg if isinstance(record.msg, dict) else record.getMessage()
        line = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "msg": msg,
        }
        if record.exc_info:
            line["exc"] = self.formatException(record.exc_info)
        return json.dumps(line, sort_keys=True, default=str)


def get_logger(name="attestation", level=None, to_file=None):
    """Structured JSON-line logger shared by all attestation store components."""
    logger = logging.getLogger(name)
    if level is None:
        level = os.getenv("ATTESTATION_LOG_LEVEL", "INFO").upper()
    logger.setLevel(level)

    if not logger.handlers:
        formatter = JsonLineFormatter()
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def event(name: str, **fields) -> dict:
    """Build a structured log event; JsonLineFormatter serialises it once."""
    body = {"event": name}
    body.update(fields)
    return body
