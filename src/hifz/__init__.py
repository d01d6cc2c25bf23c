"""Hifz: Quran memorization (loo7) assignment tracker."""

__version__ = "0.1.0"
