"""
logieventos.api.routers

HTTP routers, one module per area (auth, users, catalog, taxonomies,
contracts, reports, health).
"""

# Package marker.
