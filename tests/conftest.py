"""Test configuration and fixtures."""

import logfire

# Instrumentation in create_app expects a configured Logfire
logfire.configure(send_to_logfire=False, console=False)
