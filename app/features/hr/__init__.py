"""
HR feature module: departments, teams and employees.
"""
