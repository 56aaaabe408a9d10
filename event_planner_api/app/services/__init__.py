"""
Service layer.

Services encapsulate work that route handlers delegate: queueing
notifications, handling background jobs and sending email.
"""
