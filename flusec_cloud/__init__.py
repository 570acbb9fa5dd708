# =============================================================================
# Flusec Cloud - Package Initialization
# =============================================================================
"""
Flusec Cloud

Ingestion endpoint for security-scan findings submitted by the Flusec
editor extension, authenticated with GitHub tokens and stored in Firestore.
"""

__version__ = "1.0.0"
