"""Rich link previews - thumbnail, title and host cards for hyperlinks."""

try:
    from importlib.metadata import version

    __version__ = version("richlinks")
except Exception:
    __version__ = "0.0.0-dev"
