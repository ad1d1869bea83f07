import logging

from rich.logging import RichHandler


def configure_logging(verbose: bool = False, force: bool = False) -> None:
    root = logging.getLogger()
    level = logging.DEBUG if verbose else logging.WARNING
    root.setLevel(level)

    if root.handlers and not force:
        for handler in root.handlers:
            handler.setLevel(level)
        return

    handler = RichHandler(level=level, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.handlers.clear()
    root.addHandler(handler)
    # httpx logs every request at INFO; ours are enough.
    logging.getLogger("httpx").setLevel(logging.WARNING)
