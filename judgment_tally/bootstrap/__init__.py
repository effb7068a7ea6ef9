"""Process-wide wiring: configuration, attestation service, metrics, logging.

API dependencies call the get_* / build_* functions here; tests swap
implementations with set_* and restore them with reset_*.
"""
