"""Services used by mgit commands."""
