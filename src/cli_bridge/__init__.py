from superai import __version__  # noqa: F401
