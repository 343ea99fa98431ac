"""
High-level use cases for the storefront API.

Each service module orchestrates the repository and domain rules to implement
business behaviour (browse the catalog, fill a cart, place an order, etc.).

Routers (FastAPI endpoints) call these services instead of opening database
sessions or reading cookies directly.
"""
