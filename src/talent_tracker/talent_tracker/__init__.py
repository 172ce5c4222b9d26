"""Talent Tracker timecards package.

Organized by feature modules (timecards, rates, audit, payroll, ...) with a
thin Flask controller layer over service and repository layers.
"""
