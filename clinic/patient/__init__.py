"""
Patient service
"""
