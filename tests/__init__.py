# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the SB Foods API. No MongoDB server
# is needed: the database connector is faked or the driver is patched.
#
# Run tests with: pytest
# =============================================================================
