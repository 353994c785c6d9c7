"""Flask JSON API (and a tiny demo page) over fieldsuggest.AutoCompleteEngine."""
from .web import app, main

__all__ = ["app", "main"]
