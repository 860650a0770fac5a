"""Historic execution records and their expiry."""
