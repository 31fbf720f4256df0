import logging, json, sys, time, os


class JsonFormatter(logging.Formatter):
    """One JSON object per line; message text is escaped by json.dumps."""

    converter = time.gmtime  # Use UTC timestamps

    def format(self, record):
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _resolve_level(level):
    if isinstance(level, int):
        return level, None
    resolved = logging.getLevelName(str(level).upper())
    if isinstance(resolved, int):
        return resolved, None
    return logging.INFO, level


def get_logger(name="sshkey", level=None, to_file=None):
    """Unified structured logger for all sshkey_core components."""
    logger = logging.getLogger(name)
    level, unknown = _resolve_level(level or os.getenv("SSHKEY_LOG_LEVEL", "INFO"))
    logger.setLevel(level)
    to_file = to_file or os.getenv("SSHKEY_LOG_FILE")

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = JsonFormatter(datefmt="%Y-%m-%dT%H:%M:%SZ")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            # Ensure the directory exists before writing
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    if unknown:
        logger.warning(f"[LOGGER] unknown log level {unknown!r}, using INFO")
    return logger
