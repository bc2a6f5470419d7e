"""
Itinerary models and service.
"""
