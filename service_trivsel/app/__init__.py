"""
Trivsel gateway service package.

The gateway answers "what is the environmental state at this coordinate?"
for the Kristiansand area by fanning out to independent providers:
- Climate: MET Norway Locationforecast
- Pollution: MET Norway Air Quality Forecast
- Elevation: Kartverket / GeoNorge
- Energy: mocked

Structure:
- app.main: FastAPI app, routes, and middleware wiring.
- app.domain: Geo validation and provider result types.
- app.caching: In-process TTL cache.
- app.ratelimit: Fixed-window limiter and client identity.
- app.adapters: Retrying upstream HTTP fetcher.
- app.providers: One adapter per data kind with its fallback policy.
- app.aggregation: Single-point summary and grid fan-out.
"""
