"""Reply prediction for email: conversation threading, features and labelled datasets."""

__version__ = "0.1.0"
