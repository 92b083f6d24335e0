"""Command-line entry points.

This package contains the console scripts:
- main: ``cc``, run and manage local models
- login_cli: ``cc-login``, cloud provider authentication
- cloud_cli: ``cc-cloud``, instance sizing, pricing and provisioning
- hardware_cli: ``cc-analyze-hardware``
- optimize_cli: ``cc-optimize``
- install_cli: ``cc-install-cloud-deps``
- benchmark_cli: ``cc-test-models``
"""

__all__ = []
