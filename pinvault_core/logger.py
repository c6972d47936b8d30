import logging, json, os, re, sys, time

# key=<64 hex chars>, the hex form of a 256-bit record key
_KEY_HEX = re.compile(r"(?i)(key[_ ]?(?:hex)?\s*[=:]\s*)[0-9a-f]{64}")


class RedactKeyFilter(logging.Filter):
    """Masks record keys that slip into a log line as key=<64 hex chars>."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        redacted = _KEY_HEX.sub(r"\1[redacted]", msg)
        if redacted != msg:
            record.msg, record.args = redacted, ()
        return True


def get_logger(name="pinvault", level=None, to_file=None):
    """Structured JSON-line logger shared by all PinVault components."""
    logger = logging.getLogger(name)
    logger.setLevel(level or os.getenv("PINVAULT_LOG_LEVEL", "INFO").upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt=json.dumps({
                "ts": "%(asctime)s",
                "level": "%(levelname)s",
                "name": "%(name)s",
                "msg": "%(message)s"
            }),
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        formatter.converter = time.gmtime  # UTC
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.addFilter(RedactKeyFilter())

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
