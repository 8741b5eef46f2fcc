"""
Shared Kernel Module
====================

This module contains shared infrastructure used across all bounded contexts
(feedback intake, issue triage, employees and analytics).

Architecture Pattern: Modular Monolith
- Each module (feedback, issues, employees, analytics) is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add business logic from the bounded contexts to the shared kernel.
"""
