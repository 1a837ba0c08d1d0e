# ============================================================================
# SCRIPTS
# ============================================================================
# STATUS: Command-line entry points
# ============================================================================
