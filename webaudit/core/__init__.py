"""
Core components for audit system.

Contains:
- Data models (Issue, Metrics, AreaResult, AuditReport)
- Auditor contract, recorder and lifecycle
"""
