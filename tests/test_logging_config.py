import logging

from volunteer_board_api.app.core.logging_config import setup_logging


def test_setup_logging_adds_console_and_file_handlers(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    for handler in saved_handlers:
        root.removeHandler(handler)
    logfile = tmp_path / "logs" / "app.log"
    added = []
    try:
        setup_logging("debug", str(logfile))
        added = root.handlers[:]

        assert root.level == logging.DEBUG
        assert [type(h) for h in added] == [logging.StreamHandler, logging.FileHandler]
        assert logfile.parent.is_dir()

        setup_logging("error")
        assert root.handlers == added
        assert root.level == logging.DEBUG
    finally:
        for handler in added:
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
