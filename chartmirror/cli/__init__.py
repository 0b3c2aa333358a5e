"""
CLI commands — sync, status and check-config.
"""
