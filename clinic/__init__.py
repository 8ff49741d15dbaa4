"""
Patient scheduling services: doctor, patient and schedules
"""

__version__ = "1.0.0"
