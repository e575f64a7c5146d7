"""Shared configuration and database helpers."""
