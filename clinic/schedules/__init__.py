"""
Schedules service
"""
