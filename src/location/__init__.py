"""
Location resolution for the weather layer.

Modules:
    models       — Coordinate, PlaceLabel, LocationResult, Provenance
    geolocation  — Position sources and the timeout-bounded acquire_position
    resolver     — Fix -> label -> fallback chain, always yields a location
"""
