"""Utility functions."""

from app.utils.time import ClinicClock, Clock, FixedClock, utc_now

__all__ = ["utc_now", "Clock", "ClinicClock", "FixedClock"]
