"""
Weather acquisition with graceful degradation.

Modules:
    config      — WeatherConfig, read from the environment
    models      — DailyForecast, WeatherSnapshot, Source
    provider    — OpenWeatherMap client (current, forecast, geocoding)
    normalizer  — Collapse 3-hourly samples into daily forecasts
    synthetic   — Fixed built-in dataset for offline operation
    controller  — Orchestrate live fetch, cache and synthetic fallbacks
"""
