"""Domain models: jobs, quota snapshots, pages and errors."""
