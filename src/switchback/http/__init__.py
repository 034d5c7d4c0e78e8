"""HTTP types — the Request the router reads and the Response it writes."""
