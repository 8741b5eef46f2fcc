"""
Issues Module
=============

Bounded Context for issue detection and review.

Responsibilities:
- Extract issues from negative feedback (LLM with keyword fallback)
- Deduplicate against approved, pending and rejected issues
- Draft resolutions
- Approve, reject and merge pending issues
"""
