import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def configure_logging(log_dir=None, *, verbose=False, log_name="build.log"):
    """Attach a file handler (when ``log_dir`` is set) and a console handler to the root logger."""
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger("")
    root.setLevel(level)
    for handler in list(root.handlers):
        if getattr(handler, "_icandy_handler", False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(log_dir, log_name), encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        file_handler._icandy_handler = True
        root.addHandler(file_handler)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console.setLevel(level)
    console._icandy_handler = True
    root.addHandler(console)

    # urllib3 logs every connection at DEBUG; keep it quiet unless asked.
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose else logging.WARNING)
    return root
