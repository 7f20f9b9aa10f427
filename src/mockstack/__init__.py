"""mockstack

Integration-test scaffolding that runs ephemeral containers (a fake cloud
storage server, a document database and its data seeder) and coordinates
their provisioning, readiness and teardown around client-library checks.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
