"""Availability-to-slot resolution and booking lifecycle for shared calendars."""

__version__ = "0.1.0"
