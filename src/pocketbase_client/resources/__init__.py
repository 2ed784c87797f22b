"""Resource sub-clients sharing a session with the collection accessors.

Each module maps one resource family's endpoints to typed calls and goes
through the same authorize-then-request path as :class:`Collection`.
"""
