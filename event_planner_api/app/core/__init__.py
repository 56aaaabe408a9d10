"""
Core infrastructure: configuration, logging and the in-process job queue.
"""
