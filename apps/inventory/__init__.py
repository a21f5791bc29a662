"""Inventory app package.

Bookable supplier components (event tickets, hotel rooms, circuit and
airport transfers, flights, lounge passes) together with the availability
checker and the guarded capacity updates used when a quote becomes a
booking.
"""
