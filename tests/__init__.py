"""
Test Suite for DANUU-MD Bot.

Structure:
    tests/
    ├── conftest.py          # Shared fixtures and configuration
    ├── helpers.py           # Fake protocol client/handle, send assertions
    ├── unit/                # Mock-based unit tests
    │   ├── test_dispatcher.py
    │   ├── test_commands.py
    │   ├── test_models.py
    │   ├── test_supervisor.py
    │   ├── test_reconnect.py
    │   ├── test_auth_state.py
    │   ├── test_alerts.py
    │   ├── test_pairing.py
    │   └── test_protocol.py
    └── integration/         # Whole bot driven through a fake client
        └── test_session_flow.py

Run tests:
    pytest tests/                    # All tests
    pytest tests/unit/               # Unit tests only
    pytest tests/integration/        # Integration tests only
    pytest tests/ -v                 # Verbose output
    pytest tests/ -m integration     # Tests marked @pytest.mark.integration
"""
