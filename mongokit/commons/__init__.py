"""Commons package - settings, telemetry and storage helpers."""
