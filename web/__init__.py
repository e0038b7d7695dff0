"""HTTP front end for the decision workshop."""

__version__ = "1.0.0"
