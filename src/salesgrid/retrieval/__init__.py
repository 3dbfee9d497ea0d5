"""Remote access and caching: transport client, reference lookups, record cache."""
