"""golf-search: brute-force code golf search."""
