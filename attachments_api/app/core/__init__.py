"""
Core infrastructure: configuration, logging, the SQLite backed bucket
store and the error taxonomy shared by both services.
"""
