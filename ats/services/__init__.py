"""
Service layer: access scoping, audit ledger, custom field registry, record
stores, notifications and maintenance jobs.
"""
