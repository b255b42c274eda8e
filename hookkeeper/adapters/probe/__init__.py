"""Validation probe adapters.

Send the probe request used to check candidate hook URLs.
"""
