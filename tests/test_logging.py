import io
import logging

from npexact.core.logging import configure_logging, get_logger


def test_child_loggers_share_the_package_namespace():
    assert get_logger("registry").name == "npexact.registry"
    assert get_logger("registry").parent is logging.getLogger("npexact")


def test_configure_logging_swaps_its_handler():
    root = logging.getLogger("npexact")
    first_stream, second_stream = io.StringIO(), io.StringIO()
    first = configure_logging("DEBUG", stream=first_stream)
    second = None
    try:
        get_logger("exact").debug("table built")
        assert "npexact.exact DEBUG: table built" in first_stream.getvalue()

        second = configure_logging(logging.WARNING, stream=second_stream)
        assert first not in root.handlers
        assert second in root.handlers
        get_logger("exact").info("hidden")
        get_logger("exact").warning("shown")
        assert "hidden" not in second_stream.getvalue()
        assert "shown" in second_stream.getvalue()
    finally:
        for handler in (first, second):
            if handler is not None:
                root.removeHandler(handler)
        root.setLevel(logging.NOTSET)
