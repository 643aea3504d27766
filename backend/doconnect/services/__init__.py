"""Services Layer - image storage, token issuance, cascade deletion, and the use cases
that compose them.

Invariants:
    - Services receive their collaborators (session, directory, settings) as arguments
    - No service retries; errors surface to the calling route or job
"""
