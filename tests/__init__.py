"""mockstack test suite.

Folder taxonomy
- unit/         : Isolated, fast checks of a single module/class/function. No
                  container is started; pools are in-memory fakes and SDK
                  clients are mocks.
- integration/  : Real containers through the Docker Engine. Skipped when the
                  daemon is not reachable.
- e2e/          : The ``mockstack`` command driven through CliRunner.
- fixtures/     : Shared pytest fixtures, registered via ``pytest_plugins``.

General guidance
- Prefer the in-memory pool over mocks when testing orchestration.
- Property-based tests live with the layer they exercise and use
  @pytest.mark.property.
"""
