"""
Doctor service
"""
