"""
Employees Module
================

Bank staff and their interactions with customer feedback.
"""
