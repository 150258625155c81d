"""
Hospital billing reconciliation service.
"""
