"""Companion - a terminal chat companion for Gemini with browser tools"""

__version__ = "0.1.0"
