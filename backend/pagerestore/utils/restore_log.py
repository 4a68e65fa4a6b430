import logging

restore_logger = logging.getLogger("pagerestore.restore")


def configure_restore_log(app):
    """Attach a file handler to the diagnostic log when one is configured."""
    path = app.config.get("RESTORE_LOG_PATH")
    if not app.config.get("RESTORE_LOG_ENABLED") or not path:
        return
    if any(getattr(h, "baseFilename", None) == path for h in restore_logger.handlers):
        return
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    restore_logger.addHandler(handler)
    restore_logger.setLevel(logging.INFO)


def note(enabled: bool, message: str, **details):
    if not enabled:
        return
    if details:
        message = message + " " + " ".join(f"{k}={v}" for k, v in sorted(details.items()))
    restore_logger.info(message)
