"""Service clients used by the scenarios: Cloud Storage and MongoDB."""
