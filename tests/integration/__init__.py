"""Integration tests.

Each test gets its own ``docker_pool``; anything still labelled with the
pool's session after the test is reported as a leak. Scenarios that pull or
build images are marked ``slow``.
"""
