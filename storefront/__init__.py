"""Storefront API with a stale-while-revalidate query cache."""
