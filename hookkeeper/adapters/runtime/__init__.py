"""Server runtime adapters.

Provide the job registry the re-registration coordinator walks, and the
GitHub push triggers attached to jobs.
"""
