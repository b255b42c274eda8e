"""External adapters for the hookkeeper webhook manager.

This package contains all external dependencies (SQLite, httpx, cryptography,
HTTP servers, etc.) and provides implementations of the core port interfaces.

Adapter Organization:

- identity/: Per-installation RSA identity key
- probe/: Validation probes for candidate hook URLs
- store/: Hook configuration persistence
- runtime/: Server runtime, job registry and GitHub push triggers
- cli/: Command-line interface and management commands
- webhook/: HTTP server for the admin API and the GitHub webhook endpoint
"""
