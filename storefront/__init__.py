"""Storefront API package."""
