"""LunaFace: a reactive animated face driven by camera expression scores."""

__version__ = "0.1.0"
