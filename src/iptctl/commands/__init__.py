"""CLI command groups for iptctl."""
