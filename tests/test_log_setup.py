import logging

import structlog

from liqsweep.config import LoggingSettings
from liqsweep.utils import setup_logging


def test_setup_logging_writes_rotating_file(tmp_path):
    log_file = tmp_path / "logs" / "liqsweep.log"
    try:
        setup_logging(LoggingSettings(level="info", file_path=str(log_file), json_format=True))
        logging.getLogger("liqsweep.tests").info("sweep logged")
        logging.getLogger("liqsweep.tests").debug("below level")
        structlog.get_logger("liqsweep.tests").warning("structured", bars=3)
    finally:
        logging.basicConfig(force=True, handlers=[logging.NullHandler()], level=logging.WARNING)
        structlog.reset_defaults()

    text = log_file.read_text()
    assert "sweep logged" in text
    assert "below level" not in text
    assert '"event": "structured"' in text
    assert '"bars": 3' in text
