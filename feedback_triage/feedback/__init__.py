"""
Feedback Module
===============

Bounded Context for customer feedback intake.

Responsibilities:
- Store and filter customer reviews per banking service channel
- Derive sentiment from star ratings
- Bulk import feedback from CSV
- Hand negative feedback to issue detection
"""
