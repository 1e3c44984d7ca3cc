"""dingus-aid: ask for a shell command in plain language, then run it or copy it."""

__version__ = "0.3.0"
