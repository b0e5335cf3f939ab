import logging

FORMAT = '{asctime}\t{name}\t{levelname}\t{message}'

def init_logging(level='INFO', path=None):
    """Send log records from this package to stderr, and optionally to a file.

    Any handlers installed by a previous call are replaced, so scripts can call
    this once per ensemble to redirect the log file.
    """
    log = logging.getLogger()
    log.setLevel('WARNING')
    logging.getLogger('pyglycoensemble').setLevel(level)
    logging.getLogger('glycoensemble').setLevel(level)

    for handler in log.handlers[:]:
        log.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(FORMAT, style='{')
    handlers = [logging.StreamHandler()]
    if path is not None:
        handlers.append(logging.FileHandler(path))

    for handler in handlers:
        handler.setFormatter(formatter)
        log.addHandler(handler)

def kv(key, value):
    """Utility for logging key/value pairs in a consistent format."""
    return f"- {key+':':<35} {value}"
