"""Stillpoint: a restartable meditation countdown."""

__version__ = "0.1.0"
