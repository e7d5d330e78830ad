"""Core logic for buildnum: configuration, GitHub refs and allocation."""
