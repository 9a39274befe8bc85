"""
Operations feature module: orders, quotations, shipments and subscriptions.
"""
