"""Shared configuration, errors, validation and money helpers."""
