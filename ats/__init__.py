"""
Applicant tracking system records core.

Audited CRUD over the recruiting entities (organizations, hiring managers,
jobs, job seekers, leads, tasks, placements) with admin-defined custom fields.
"""

__version__ = "1.0.0"
