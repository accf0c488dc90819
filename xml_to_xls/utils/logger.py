import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path


class SizeAndTimeRotatingFileHandler(TimedRotatingFileHandler):
    def __init__(self, filename, when='midnight', interval=1, backupCount=0, encoding=None, delay=False, utc=False, atTime=None, maxBytes=20*1024*1024):
        super().__init__(filename, when, interval, backupCount, encoding, delay, utc, atTime)
        self.maxBytes = maxBytes

    def shouldRollover(self, record):
        # Time-based rollover
        if super().shouldRollover(record):
            return 1
        # Size-based rollover
        if self.stream is None:  # Delay was set...
            self.stream = self._open()
        if self.maxBytes > 0:
            self.stream.seek(0, 2)  # Go to end of file
            if self.stream.tell() + len(self.format(record).encode(self.encoding or "utf-8")) >= self.maxBytes:
                return 1
        return 0


def setup_logger(name: str, log_file: str, max_bytes: int = 20 * 1024 * 1024) -> logging.Logger:
    """Configure and return a logger instance."""
    # Create logs directory if it doesn't exist
    log_dir = Path(log_file).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    # Audit entries stay out of the application log
    logger.propagate = False

    if any(getattr(h, "baseFilename", None) == str(Path(log_file).resolve()) for h in logger.handlers):
        return logger

    handler = SizeAndTimeRotatingFileHandler(
        log_file,
        when='midnight',
        backupCount=30,  # Keep up to 30 log files
        encoding='utf-8',
        maxBytes=max_bytes
    )
    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
