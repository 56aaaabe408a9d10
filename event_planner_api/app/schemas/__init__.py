"""
Pydantic schema definitions.

Job payloads are typed per job kind; HTTP response bodies for the job
and mail endpoints are defined alongside them.
"""
