import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from garment_hr.core.config import settings


def configure_logging(level: int | str = settings.log_level) -> None:
    log_path = Path(settings.data_dir) / "app.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    root_logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # passlib probes the bcrypt backend noisily at first hash
    logging.getLogger("passlib").setLevel(logging.ERROR)
