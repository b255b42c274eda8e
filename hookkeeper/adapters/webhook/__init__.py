"""Webhook and admin HTTP adapters.

Provides HTTP endpoints for:
- Checking and applying the hook configuration
- Triggering hook re-registration
- Receiving GitHub deliveries and answering validation probes
"""
