"""
Analytics Module
================

Dashboard aggregates over feedback, issues and employee interactions.
"""
