"""Built-in text providers; each module exposes a ``Provider`` class."""
