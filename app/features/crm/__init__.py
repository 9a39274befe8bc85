"""
CRM feature module: contacts, companies, leads and opportunities.
"""
