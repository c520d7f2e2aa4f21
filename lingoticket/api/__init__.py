"""HTTP boundary: routes and error mapping."""
