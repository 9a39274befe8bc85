"""
Applicant tracking feature module: candidates, applications and interviews.
"""
