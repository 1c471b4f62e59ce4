"""Portfolio project listing: storage, repository and web layer."""
