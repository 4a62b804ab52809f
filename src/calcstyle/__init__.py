"""calcstyle: evaluation engine for CSS-like calc()/env() style expressions."""

__version__ = "0.1.0"
