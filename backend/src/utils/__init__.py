"""
Utility modules for the rehab scheduler.

This package contains shared helpers used across the application, chiefly
the clinic time zone utilities in datetime_utils.
"""
