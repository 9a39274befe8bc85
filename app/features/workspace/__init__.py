"""
Workspace feature module: tasks, notifications, files, SOPs and the password vault.
"""
