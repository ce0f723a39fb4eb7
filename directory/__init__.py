"""Business directory core: slugs, filters, pagination and search."""
