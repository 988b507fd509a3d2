"""Service-calendar resolution and departure matching over a GTFS static schedule."""
