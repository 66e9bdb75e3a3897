"""HTTP interface to the backup service."""
