"""Location resolution package: providers, ranking, caching and rate limiting."""
