"""
slotengine - bookable slot computation for expert wellbeing sessions.
"""

__version__ = "0.1.0"
