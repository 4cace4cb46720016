"""Application server bootstrap: request pipeline, session auth and listener."""

__version__ = "0.1.0"
