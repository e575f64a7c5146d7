"""Infraestructura: persistencia de lecturas."""
