"""
Domain models module.

Transaction records, lifecycle enums and the typed step payloads that
accumulate user input across an application.
"""
