"""Bookings app package.

Turns accepted quotes into bookings: re-checks component availability,
writes the booking with its components, payment schedule and travelers in
one transaction, and keeps an append-only activity log for every change
to the booking afterwards.
"""
