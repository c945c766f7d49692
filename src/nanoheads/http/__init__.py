"""Source URL fetching and HTML text extraction."""
