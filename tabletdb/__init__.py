"""Graphics tablet capability database."""
