"""End-to-end tests of the ``mockstack`` command line."""
